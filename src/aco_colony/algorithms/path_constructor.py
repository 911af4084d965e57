"""
経路構築モジュール

1匹のアリについて、スタートノードからゴールノードへの経路を確率的に構築します。

【Random Proportional Rule】
未訪問ノード j への遷移重み:
    w_j = max(τ_ij, τ_min)^α * (1 / max(d_ij, ε))^β
選択確率は p_j = w_j / Σ w_l（ルーレット選択）。

【終了条件】
- ゴールに到達（成功）
- 未訪問ノードが尽きた（失敗）
- 有限かつ正の重みを持つ候補が存在しない（行き止まり、失敗）
"""

import math
from typing import Dict, Iterable, List, Optional, Tuple

from ..core.ant import Ant
from ..core.graph import DISTANCE_EPSILON, CompleteGraph
from ..core.random_source import DeterministicRandom
from ..modules.pheromone import MIN_PHEROMONE, PheromoneField


class PathConstructor:
    """
    ルーレット選択による経路構築

    Attributes:
        rng (DeterministicRandom): 次ノード選択に使用する乱数生成器（エンジン全体で共有）
    """

    def __init__(self, rng: DeterministicRandom):
        self.rng = rng

    def construct(
        self,
        start_node: int,
        graph: CompleteGraph,
        pheromones: PheromoneField,
        alpha: float,
        beta: float,
        ant_id: int = 0,
    ) -> Ant:
        """
        経路を構築します。

        Args:
            start_node: 開始ノード
            graph: 完全グラフ
            pheromones: フェロモン行列（構築中は読み取りのみ）
            alpha: フェロモンの影響指数
            beta: ヒューリスティックの影響指数
            ant_id: アリの識別子

        Returns:
            経路を記録したAnt。成功・失敗にかかわらず訪問順の全ノードを保持します
        """
        ant = Ant(ant_id, start_node, graph.end_node)
        num_nodes = graph.num_nodes

        while not ant.has_reached_goal() and ant.visited_count() < num_nodes:
            candidates = self.candidate_weights(
                ant.current_node,
                (j for j in range(num_nodes) if not ant.has_visited(j)),
                graph,
                pheromones,
                alpha,
                beta,
            )
            next_node = self._roulette_select(candidates)
            if next_node is None:
                # 有効な候補がない場合は探索失敗
                break
            ant.move_to(next_node, graph.distance(ant.current_node, next_node))

        return ant

    @staticmethod
    def candidate_weights(
        current: int,
        unvisited: Iterable[int],
        graph: CompleteGraph,
        pheromones: PheromoneField,
        alpha: float,
        beta: float,
    ) -> List[Tuple[int, float]]:
        """
        未訪問ノードへの遷移重みを計算します。

        有限かつ正の重みを持つ候補のみを、ノード番号の昇順で返します。

        Returns:
            [(node, weight), ...]
        """
        candidates = []
        for j in unvisited:
            tau = _power(max(pheromones.value(current, j), MIN_PHEROMONE), alpha)
            eta = _power(1.0 / max(graph.distance(current, j), DISTANCE_EPSILON), beta)
            weight = tau * eta
            if math.isfinite(weight) and weight > 0:
                candidates.append((j, weight))
        return candidates

    def _roulette_select(self, candidates: List[Tuple[int, float]]) -> Optional[int]:
        """
        重みに比例した確率でノードを選択します。

        累積和が乱数値に届かない場合（浮動小数点の丸め誤差）は最後の候補を選びます。
        """
        if not candidates:
            return None

        total = sum(weight for _, weight in candidates)
        threshold = self.rng.next() * total
        accumulated = 0.0
        for node, weight in candidates:
            accumulated += weight
            if threshold <= accumulated:
                return node
        return candidates[-1][0]

    @classmethod
    def transition_probabilities(
        cls,
        current: int,
        visited: Iterable[int],
        graph: CompleteGraph,
        pheromones: PheromoneField,
        alpha: float,
        beta: float,
    ) -> Dict[int, float]:
        """
        現在ノードからの遷移確率を返します（検証・可視化用、乱数は消費しません）。

        Returns:
            {node: probability}。候補がない場合は空の辞書
        """
        visited = set(visited)
        unvisited = (j for j in range(graph.num_nodes) if j not in visited)
        candidates = cls.candidate_weights(
            current, unvisited, graph, pheromones, alpha, beta
        )
        total = sum(weight for _, weight in candidates)
        return {node: weight / total for node, weight in candidates}


def _power(base: float, exponent: float) -> float:
    # 桁あふれはinfとして扱い、候補から除外させる
    try:
        return base**exponent
    except OverflowError:
        return math.inf
