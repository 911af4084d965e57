"""
シミュレーション制御モジュール

グラフ・フェロモン行列・乱数生成器・最良経路の状態を1つのオブジェクトに所有させ、
実行・一時停止・1ステップ実行・リセット・パラメータ変更のライフサイクルを管理します。

【状態遷移】
    idle ──start()──> running ──pause()──> paused ──start()──> running
      ^                                       │
      └──────── generate_graph() / reset() ───┘

【自動実行】
協調的スケジューラとして実装しています。ホスト側のループ（UIのタイマー等）が
tick(now) を呼び出すと、step_interval が経過していれば1ステップだけ実行します。
pause() は次にスケジュールされるステップより前に効き、実行中のステップは中断しません。
"""

import math
import random
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import numpy as np

from ..algorithms.colony_engine import ColonyIterationEngine, IterationResult
from ..config import (
    GRAPH_FIELDS,
    RESET_FIELDS,
    SCHEDULE_FIELDS,
    ColonyConfig,
)
from ..core.graph import CompleteGraph
from ..core.random_source import DeterministicRandom
from ..modules.pheromone import PheromoneField

STATUS_IDLE = "idle"
STATUS_RUNNING = "running"
STATUS_PAUSED = "paused"


@dataclass
class SimulationState:
    """
    シミュレーション状態

    「まだ1世代も実行していない」「実行したが経路が見つからない」は
    best_path が None、best_length が inf で表し、長さ0の経路とは区別します。
    """

    iteration: int = 0
    best_path: Optional[List[int]] = None
    best_length: float = math.inf
    iteration_best_path: Optional[List[int]] = None
    iteration_best_length: float = math.inf
    last_result: Optional[IterationResult] = None
    best_length_history: List[float] = field(default_factory=list)
    history_limit: Optional[int] = None  # Noneなら全世代を保持

    def record(self, result: IterationResult) -> bool:
        """
        世代の結果を反映します。

        成功したアリがいない世代では世代最良を未定義（None, inf）に戻します。

        Returns:
            大域最良が更新された場合True
        """
        self.iteration += 1
        self.last_result = result
        self.iteration_best_path = list(result.best_path) if result.found_path else None
        self.iteration_best_length = result.best_length
        improved = False
        if result.found_path and result.best_length < self.best_length:
            self.best_path = list(result.best_path)
            self.best_length = result.best_length
            improved = True
        self.best_length_history.append(self.best_length)
        if self.history_limit is not None:
            del self.best_length_history[: -self.history_limit]
        return improved

    @property
    def has_path(self) -> bool:
        return self.best_path is not None


class SimulationController:
    """
    ACOシミュレーションの制御クラス

    Attributes:
        config (ColonyConfig): 現在のコロニー設定
        rng (DeterministicRandom): エンジン内の唯一の乱数源
        engine (ColonyIterationEngine): 1世代の実行エンジン
        graph (CompleteGraph): 現在のグラフ
        pheromones (PheromoneField): 現在のフェロモン行列
        state (SimulationState): 世代数と最良経路
        on_step (List[Callable]): step()の後に呼ばれるコールバック（描画層向け）

    Example:
        >>> controller = SimulationController(ColonyConfig(node_count=8, seed=7))
        >>> result = controller.step()
        >>> controller.iteration
        1
    """

    def __init__(
        self, config: Optional[ColonyConfig] = None, history_limit: Optional[int] = None
    ):
        """
        Args:
            config: コロニー設定（省略時は既定値）
            history_limit: best_length_historyに保持する直近の世代数（Noneなら無制限）
        """
        if history_limit is not None and (
            not isinstance(history_limit, int) or history_limit < 1
        ):
            raise ValueError(f"history_limit must be an integer >= 1, got {history_limit!r}")
        self.history_limit = history_limit
        self.config = config if config is not None else ColonyConfig()
        self.config.validate()
        self.rng = DeterministicRandom(self.config.seed)
        self.engine = ColonyIterationEngine(self.rng)
        self.on_step: List[Callable[["SimulationController", IterationResult], None]] = []

        self._running = False
        self._paused = False
        self._next_due: Optional[float] = None
        self._build()

    # ------------------------------------------------------------------
    # ライフサイクル
    # ------------------------------------------------------------------

    def _build(self) -> None:
        """現在の設定でグラフとフェロモン行列を生成し、状態を初期化"""
        config = self.config
        self.graph = CompleteGraph.generate(
            config.node_count,
            config.seed,
            directed=config.directed,
            width=config.region_width,
            height=config.region_height,
            margin=config.margin,
            rng=self.rng,
        )
        self.pheromones = PheromoneField(
            config.node_count, tau0=config.tau0, directed=config.directed
        )
        self.state = SimulationState(history_limit=self.history_limit)

    def generate_graph(self, seed: Optional[int] = None) -> CompleteGraph:
        """
        グラフを再生成します（フェロモン行列もτ0で再生成）。

        Args:
            seed: 新しいシード。Noneの場合は新しいシードをランダムに決めます

        Returns:
            生成されたグラフ

        Raises:
            ValueError: シードが整数でない場合（状態は変更されません）
        """
        if seed is None:
            # エンジン外部で新しいシードを決める（グラフ内の乱数は全てシードから再現可能）
            seed = random.randint(0, 9999)
        self.config = self.config.updated(seed=seed)
        self._running = False
        self._paused = False
        self._next_due = None
        self._build()
        return self.graph

    def reset(self) -> None:
        """現在のシードでグラフを再生成し、世代数と最良経路をリセット"""
        self.generate_graph(self.config.seed)

    def step(self) -> IterationResult:
        """
        1世代を実行します。状態（running/paused）は変更しません。

        Returns:
            IterationResult
        """
        result = self.engine.run_iteration(self.graph, self.pheromones, self.config)
        self.state.record(result)
        for callback in list(self.on_step):
            callback(self, result)
        return result

    def start(self) -> None:
        """自動実行を開始（実行中なら何もしない）"""
        if self._running:
            return
        self._running = True
        self._paused = False
        self._next_due = None

    def pause(self) -> None:
        """自動実行を一時停止（停止中なら何もしない）"""
        if not self._running:
            return
        self._running = False
        self._paused = True
        self._next_due = None

    # ------------------------------------------------------------------
    # 協調的スケジューラ
    # ------------------------------------------------------------------

    def tick(self, now: float) -> Optional[IterationResult]:
        """
        自動実行の1ティック。期限が来ていれば1ステップだけ実行します。

        Args:
            now: 現在時刻（秒、単調増加する時計の値）

        Returns:
            実行した場合はIterationResult、しなかった場合はNone
        """
        if not self._running:
            return None
        if self._next_due is None:
            # start() 直後は1周期待ってから最初のステップを実行
            self._next_due = now + self.config.step_interval
            return None
        if now < self._next_due:
            return None
        if self.state.iteration >= self.config.max_iterations:
            self.pause()
            return None

        self._next_due = now + self.config.step_interval
        return self.step()

    def run(
        self,
        max_steps: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        verbose: bool = False,
    ) -> SimulationState:
        """
        自動実行をブロッキングで駆動します。

        pause() が呼ばれる（on_stepコールバックからも可）、世代数上限に達する、
        または max_steps 回実行するまで tick() を繰り返します。

        Args:
            max_steps: この呼び出しで実行する最大ステップ数（Noneなら上限なし）
            clock: 現在時刻を返す関数
            sleep: 待機関数
            verbose: 世代ごとの進捗を表示するか

        Returns:
            終了時のSimulationState
        """
        self.start()
        steps = 0
        while self._running and (max_steps is None or steps < max_steps):
            result = self.tick(clock())
            if result is not None:
                steps += 1
                if verbose:
                    print(
                        f"世代 {self.state.iteration}: "
                        f"成功 {result.success_count}/{len(result.ants)}, "
                        f"世代最良 {result.best_length:.2f}, "
                        f"大域最良 {self.state.best_length:.2f}"
                    )
                continue
            if self._running and self._next_due is not None:
                sleep(max(0.0, self._next_due - clock()))
        if max_steps is not None and steps >= max_steps:
            self.pause()
        return self.state

    # ------------------------------------------------------------------
    # パラメータ変更
    # ------------------------------------------------------------------

    def update_params(self, **changes) -> None:
        """
        パラメータを変更します。

        - alpha, beta, rho, q, colony_size, start_distribution, max_iterations:
          次の step() から反映
        - tau0, directed: フェロモン行列の不変条件を保つため reset() を伴う
        - node_count, seed, region_width, region_height, margin: グラフを再生成
        - step_interval: 自動実行中なら次の期限を引き直す

        Raises:
            ValueError: 未知のキーまたは不正な値（設定と状態は変更されません）
        """
        if not changes:
            return
        new_config = self.config.updated(**changes)
        changed = {
            name
            for name, value in changes.items()
            if getattr(self.config, name) != value
        }
        self.config = new_config

        if changed & (GRAPH_FIELDS | RESET_FIELDS):
            self.generate_graph(self.config.seed)
        elif changed & SCHEDULE_FIELDS and self._running:
            self._next_due = None

    # ------------------------------------------------------------------
    # 出力
    # ------------------------------------------------------------------

    @property
    def status(self) -> str:
        if self._running:
            return STATUS_RUNNING
        if self._paused:
            return STATUS_PAUSED
        return STATUS_IDLE

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def iteration(self) -> int:
        return self.state.iteration

    @property
    def best_path(self) -> Optional[List[int]]:
        return self.state.best_path

    @property
    def best_length(self) -> float:
        return self.state.best_length

    @property
    def iteration_best_path(self) -> Optional[List[int]]:
        return self.state.iteration_best_path

    @property
    def iteration_best_length(self) -> float:
        return self.state.iteration_best_length

    def pheromone_snapshot(self) -> np.ndarray:
        return self.pheromones.snapshot()

    def heuristic_snapshot(self) -> np.ndarray:
        return self.graph.heuristic_matrix()

    def __repr__(self) -> str:
        return (
            f"SimulationController(status={self.status}, iteration={self.iteration}, "
            f"best_length={self.best_length:.2f})"
        )
