"""服务端配置测试"""
from core.state import Phase
from server.config import ServerConfig


class TestServerConfig:

    def test_defaults(self):
        config = ServerConfig()
        assert config.play_hand_timeout_ms == 30000
        assert config.match_select_timeout_ms == 15000
        assert config.go_stop_timeout_ms == 15000
        assert config.max_chain_iterations == 200

    def test_deadlines(self):
        config = ServerConfig()
        assert config.deadline_ms(Phase.PLAY_HAND) == 30000
        assert config.deadline_ms(Phase.HAND_MATCH_SELECT) == 15000
        assert config.deadline_ms(Phase.DRAW_MATCH_SELECT) == 15000
        assert config.deadline_ms(Phase.GO_STOP_DECISION) == 15000

    def test_no_deadline_without_input(self):
        config = ServerConfig()
        for phase in (Phase.IDLE, Phase.DRAW, Phase.RESOLVE_CAPTURE, Phase.GAME_OVER):
            assert config.deadline_ms(phase) is None

    def test_from_dict_ignores_unknown(self):
        config = ServerConfig.from_dict({"play_hand_timeout_ms": 1000, "unknown": 1})
        assert config.play_hand_timeout_ms == 1000
        assert config.go_stop_timeout_ms == 15000
