"""
コロニー反復エンジン

1世代（イテレーション）分の処理を実行します。

【1世代の流れ】
1. m匹のアリについてスタートノードを決め（固定 or 一様ランダム）、経路を構築
2. ゴールに到達した経路の中から世代最良（最短）を決定（成功が0匹なら未定義）
3. フェロモン行列を揮発率ρで揮発
4. 成功した各アリの経路に Δτ = Q / L を付加
5. 世代最良が大域最良より厳密に短ければ大域最良を更新（SimulationState.record）

成功したアリが1匹もいない世代もエラーではありません。揮発のみが行われ、
大域最良はそのまま維持されます。
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional

from ..config import START_UNIFORM, ColonyConfig
from ..core.ant import Ant
from ..core.graph import CompleteGraph
from ..core.random_source import DeterministicRandom
from ..modules.pheromone import PheromoneField
from .path_constructor import PathConstructor


@dataclass
class IterationResult:
    """1世代分の結果"""

    best_path: Optional[List[int]]  # 世代最良の経路（成功なしならNone）
    best_length: float  # 世代最良の経路長（成功なしならinf）
    ants: List[Ant] = field(default_factory=list)  # 全アリ（構築順）

    @property
    def all_paths(self) -> List[List[int]]:
        return [ant.route for ant in self.ants]

    @property
    def successful_ants(self) -> List[Ant]:
        """ゴールまで移動したアリ（ゴールから出発しただけのアリは含まない）"""
        return [
            ant
            for ant in self.ants
            if ant.has_reached_goal() and math.isfinite(ant.path_length)
        ]

    @property
    def success_count(self) -> int:
        return len(self.successful_ants)

    @property
    def success_rate(self) -> float:
        if not self.ants:
            return 0.0
        return self.success_count / len(self.ants)

    @property
    def found_path(self) -> bool:
        return self.best_path is not None


class ColonyIterationEngine:
    """
    ACOの1世代を実行するエンジン

    経路構築中はフェロモン行列を読み取るだけで、揮発・付加は全アリの構築完了後に行います。
    全ての確率的判断は共有の乱数生成器から順に乱数を引くため、並列化はしていません。

    Attributes:
        rng (DeterministicRandom): エンジン全体で共有する乱数生成器
        constructor (PathConstructor): 経路構築器
    """

    def __init__(self, rng: DeterministicRandom):
        self.rng = rng
        self.constructor = PathConstructor(rng)

    def choose_start(self, graph: CompleteGraph, config: ColonyConfig) -> int:
        """スタートノードを選択（uniformなら全ノードから一様に、fixedなら固定）"""
        if config.start_distribution == START_UNIFORM:
            return self.rng.randrange(graph.num_nodes)
        return graph.start_node

    def run_iteration(
        self,
        graph: CompleteGraph,
        pheromones: PheromoneField,
        config: ColonyConfig,
    ) -> IterationResult:
        """
        1世代を実行します。

        Args:
            graph: 完全グラフ
            pheromones: フェロモン行列（揮発・付加により更新されます）
            config: コロニー設定

        Returns:
            IterationResult
        """
        ants = []
        for ant_id in range(config.colony_size):
            start = self.choose_start(graph, config)
            ant = self.constructor.construct(
                start, graph, pheromones, config.alpha, config.beta, ant_id=ant_id
            )
            ants.append(ant)

        # 【世代最良】成功した経路のみを対象（同じ長さなら先に構築されたもの）
        best_ant = None
        for ant in ants:
            if ant.has_reached_goal() and ant.path_length < (
                best_ant.path_length if best_ant is not None else math.inf
            ):
                best_ant = ant

        # 【揮発】全アリの構築完了後、付加の前に行う
        pheromones.evaporate(config.rho)

        # 【付加】成功したアリのみ Δτ = Q / L
        for ant in ants:
            if not ant.has_reached_goal():
                continue
            length = ant.path_length
            if math.isfinite(length) and length > 0:
                pheromones.reinforce(ant.route, config.q / length, config.directed)

        if best_ant is None:
            return IterationResult(best_path=None, best_length=math.inf, ants=ants)
        return IterationResult(
            best_path=list(best_ant.route), best_length=best_ant.path_length, ants=ants
        )
