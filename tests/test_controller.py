"""
シミュレーション制御のテスト
"""

import math

import numpy as np
import pytest

from aco_colony.config import ColonyConfig
from aco_colony.modules.pheromone import MIN_PHEROMONE
from aco_colony.simulation.controller import (
    STATUS_IDLE,
    STATUS_PAUSED,
    STATUS_RUNNING,
    SimulationController,
)


class FakeClock:
    """sleepで時刻が進む疑似時計（テスト用）"""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def controller():
    return SimulationController(ColonyConfig(node_count=8, seed=7, step_interval=1.0))


class TestSimulationController:
    """SimulationControllerクラスのテスト"""

    def test_initial_state(self, controller):
        """生成直後は待機状態で、最良経路は未定義"""
        assert controller.status == STATUS_IDLE
        assert controller.iteration == 0
        assert controller.best_path is None
        assert controller.best_length == math.inf
        assert controller.iteration_best_path is None
        assert controller.graph.num_nodes == 8
        assert np.all(controller.pheromones.off_diagonal() == 1.0)

    def test_default_config(self):
        """設定を省略した場合は既定値"""
        controller = SimulationController()
        assert controller.config == ColonyConfig()
        assert controller.graph.num_nodes == 10

    def test_step(self, controller):
        """step()は1世代を実行し、状態を変えない"""
        result = controller.step()

        assert controller.iteration == 1
        assert controller.status == STATUS_IDLE
        assert len(result.ants) == controller.config.colony_size
        assert controller.best_path is not None
        assert controller.best_length == controller.graph.path_length(controller.best_path)
        assert controller.iteration_best_length == result.best_length

    def test_step_while_paused(self, controller):
        """一時停止中もstep()は有効"""
        controller.start()
        controller.pause()
        controller.step()

        assert controller.iteration == 1
        assert controller.status == STATUS_PAUSED

    def test_start_pause(self, controller):
        """start/pauseの状態遷移と重複呼び出し"""
        controller.pause()
        assert controller.status == STATUS_IDLE

        controller.start()
        assert controller.status == STATUS_RUNNING
        controller.start()
        assert controller.status == STATUS_RUNNING

        controller.pause()
        assert controller.status == STATUS_PAUSED
        controller.pause()
        assert controller.status == STATUS_PAUSED

        controller.start()
        assert controller.is_running

    def test_tick_cadence(self, controller):
        """tick()はstep_intervalごとに1ステップだけ実行"""
        assert controller.tick(0.0) is None  # 停止中

        controller.start()
        assert controller.tick(0.0) is None  # 期限を設定
        assert controller.tick(0.5) is None
        assert controller.tick(1.0) is not None
        assert controller.iteration == 1
        assert controller.tick(1.5) is None
        assert controller.tick(2.0) is not None
        assert controller.iteration == 2

        controller.pause()
        assert controller.tick(10.0) is None
        assert controller.iteration == 2

    def test_iteration_limit_pauses_auto_run(self):
        """世代数上限に達すると自動実行は一時停止する"""
        controller = SimulationController(
            ColonyConfig(node_count=6, max_iterations=3, step_interval=1.0)
        )
        clock = FakeClock()

        state = controller.run(clock=clock, sleep=clock.sleep)

        assert state.iteration == 3
        assert controller.status == STATUS_PAUSED

        # 手動のstep()は上限に関係なく実行できる
        controller.step()
        assert controller.iteration == 4

    def test_run_max_steps(self, controller):
        """max_stepsまで実行して一時停止"""
        clock = FakeClock()
        controller.run(max_steps=5, clock=clock, sleep=clock.sleep)

        assert controller.iteration == 5
        assert controller.status == STATUS_PAUSED
        assert clock.now == pytest.approx(5.0)

    def test_pause_from_callback(self, controller):
        """コールバックからのpause()は次のステップより前に効く"""
        clock = FakeClock()

        def stop_at_two(ctrl, result):
            if ctrl.iteration == 2:
                ctrl.pause()

        controller.on_step.append(stop_at_two)
        controller.run(clock=clock, sleep=clock.sleep)

        assert controller.iteration == 2
        assert controller.status == STATUS_PAUSED

    def test_run_verbose(self, controller, capsys):
        """verboseなら世代ごとの進捗を表示"""
        clock = FakeClock()
        controller.run(max_steps=2, clock=clock, sleep=clock.sleep, verbose=True)

        output = capsys.readouterr().out
        assert "世代 1" in output
        assert "世代 2" in output

    def test_reset(self, controller):
        """reset()は同じシードでグラフを再生成し、状態を初期化"""
        positions = controller.graph.positions
        for _ in range(5):
            controller.step()
        controller.start()

        controller.reset()

        assert controller.iteration == 0
        assert controller.best_path is None
        assert controller.best_length == math.inf
        assert controller.status == STATUS_IDLE
        assert controller.graph.positions == positions
        assert np.all(controller.pheromones.off_diagonal() == controller.config.tau0)

    def test_generate_graph_with_seed(self, controller):
        """指定シードでグラフを再生成"""
        controller.step()
        graph = controller.generate_graph(seed=1234)

        assert controller.config.seed == 1234
        assert controller.graph is graph
        assert controller.iteration == 0
        assert controller.best_path is None

    def test_generate_graph_new_seed(self, controller):
        """シード省略時は新しいシードを決める"""
        controller.generate_graph()
        assert 0 <= controller.config.seed <= 9999
        assert controller.iteration == 0

    def test_update_step_params(self, controller):
        """α/β/ρ/Q/m/start_distributionは状態を保ったまま次のstep()から反映"""
        controller.step()
        matrix = controller.pheromones.matrix.copy()

        controller.update_params(
            alpha=2.0, beta=1.0, rho=0.2, q=3.0, colony_size=4, start_distribution="fixed"
        )

        assert controller.iteration == 1
        assert np.array_equal(controller.pheromones.matrix, matrix)
        result = controller.step()
        assert len(result.ants) == 4
        assert all(ant.start_node == controller.graph.start_node for ant in result.ants)

    def test_update_tau0_resets(self, controller):
        """τ0の変更は暗黙のリセットを伴う"""
        controller.step()
        controller.update_params(tau0=2.0)

        assert controller.iteration == 0
        assert controller.best_path is None
        assert np.all(controller.pheromones.off_diagonal() == 2.0)

    def test_update_directed_resets(self, controller):
        """方向性の変更は暗黙のリセットを伴う"""
        controller.step()
        controller.update_params(directed=True)

        assert controller.iteration == 0
        assert controller.pheromones.directed is True
        assert controller.graph.directed is True

    def test_update_node_count_regenerates(self, controller):
        """ノード数の変更でグラフを再生成"""
        controller.update_params(node_count=5)
        assert controller.graph.num_nodes == 5
        assert controller.pheromones.node_count == 5

    def test_update_same_value_keeps_state(self, controller):
        """値が変わらなければリセットしない"""
        controller.step()
        controller.update_params(tau0=controller.config.tau0)
        assert controller.iteration == 1

    def test_update_step_interval_rearms(self, controller):
        """実行中にstep_intervalを変更すると期限を引き直す"""
        controller.start()
        controller.tick(0.0)
        controller.update_params(step_interval=5.0)

        assert controller.tick(1.0) is None  # 期限を設定し直す
        assert controller.tick(5.5) is None
        assert controller.tick(6.0) is not None

    def test_update_unknown_param(self, controller):
        """未知のキーは拒否され、設定は変わらない"""
        before = controller.config
        with pytest.raises(ValueError):
            controller.update_params(gamma=1.0)
        assert controller.config == before

    @pytest.mark.parametrize(
        "changes",
        [
            {"rho": 1.5},
            {"rho": 0.0},
            {"colony_size": 0},
            {"tau0": 0.0},
            {"node_count": 1},
            {"start_distribution": "random"},
        ],
    )
    def test_update_invalid_value(self, controller, changes):
        """不正な値は拒否され、設定と状態は変わらない"""
        controller.step()
        before = controller.config
        graph = controller.graph

        with pytest.raises(ValueError):
            controller.update_params(**changes)

        assert controller.config == before
        assert controller.graph is graph
        assert controller.iteration == 1

    def test_unreachable_target_is_not_error(self, controller):
        """経路が見つからない世代は「未実行」と区別できる"""
        controller.update_params(alpha=50.0, start_distribution="fixed")
        controller.pheromones.evaporate(1.0)

        result = controller.step()

        assert result.success_count == 0
        assert controller.iteration == 1
        assert controller.best_path is None
        assert controller.best_length == math.inf
        assert controller.state.last_result is result
        assert controller.state.best_length_history == [math.inf]

    def test_iteration_best_cleared_after_failed_step(self, controller):
        """成功した世代の後に成功なしの世代が来ると、世代最良は未定義に戻る"""
        controller.update_params(start_distribution="fixed")
        controller.step()
        assert controller.iteration_best_path is not None
        best_path, best_length = controller.best_path, controller.best_length

        controller.update_params(alpha=50.0)
        controller.pheromones.evaporate(1.0)
        result = controller.step()

        assert result.success_count == 0
        assert controller.iteration_best_path is None
        assert controller.iteration_best_length == math.inf
        # 大域最良は維持される
        assert controller.best_path == best_path
        assert controller.best_length == best_length
        assert controller.state.best_length_history == [best_length, best_length]

    def test_history_limit(self):
        """history_limitを指定すると直近の世代だけを保持"""
        controller = SimulationController(ColonyConfig(node_count=6), history_limit=3)
        for _ in range(5):
            controller.step()

        assert controller.iteration == 5
        assert len(controller.state.best_length_history) == 3
        assert controller.state.best_length_history[-1] == controller.best_length

        controller.reset()
        controller.step()
        assert len(controller.state.best_length_history) == 1

    @pytest.mark.parametrize("limit", [0, -1, 2.5])
    def test_invalid_history_limit(self, limit):
        with pytest.raises(ValueError):
            SimulationController(ColonyConfig(node_count=6), history_limit=limit)

    def test_snapshots(self, controller):
        """描画層向けのスナップショットは読み取り専用"""
        controller.step()
        pheromone = controller.pheromone_snapshot()
        heuristic = controller.heuristic_snapshot()

        assert pheromone.shape == (8, 8)
        assert heuristic.shape == (8, 8)
        assert pheromone.min() >= MIN_PHEROMONE
        with pytest.raises(ValueError):
            pheromone[0, 1] = 0.0
        with pytest.raises(ValueError):
            heuristic[0, 1] = 0.0

    def test_on_step_callback(self, controller):
        """step()ごとにコールバックが呼ばれる"""
        calls = []
        controller.on_step.append(lambda ctrl, result: calls.append(ctrl.iteration))
        controller.step()
        controller.step()
        assert calls == [1, 2]
