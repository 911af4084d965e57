"""
評価指標モジュール

最短経路への到達率、相対誤差、収束世代、成功率などを計算します。
"""

import math
from typing import List, Optional, Sequence

import networkx as nx
import numpy as np

from ..core.graph import CompleteGraph


class MetricsCalculator:
    """
    評価指標を計算するクラス

    Attributes:
        tolerance (float): 最適解との一致判定に使う許容誤差（相対）
    """

    def __init__(self, tolerance: float = 1e-9):
        """
        Args:
            tolerance: 最適解との一致判定に使う相対誤差
        """
        self.tolerance = tolerance

    @staticmethod
    def optimal_length(graph: CompleteGraph) -> float:
        """
        スタートからゴールへの厳密な最短経路長（Dijkstra法）

        ユークリッド距離では直接エッジが最短になりますが、任意の距離行列にも対応します。

        Args:
            graph: 完全グラフ

        Returns:
            最短経路長
        """
        return nx.shortest_path_length(
            graph.to_networkx(),
            graph.start_node,
            graph.end_node,
            weight="distance",
        )

    @staticmethod
    def detour_upper_bound(graph: CompleteGraph) -> float:
        """
        任意の単純経路長の上限 (N-1) * max(d)

        ノードを重複なく辿る経路のエッジ数は高々N-1であるため。
        """
        return (graph.num_nodes - 1) * graph.max_distance()

    def relative_error(self, found: float, optimal: float) -> float:
        """
        相対誤差 (found - optimal) / optimal を計算

        Returns:
            相対誤差。経路が見つかっていない場合はinf
        """
        if not math.isfinite(found):
            return math.inf
        if optimal == 0:
            return 0.0 if found == 0 else math.inf
        return (found - optimal) / optimal

    def is_optimal(self, found: float, optimal: float) -> bool:
        return self.relative_error(found, optimal) <= self.tolerance

    @staticmethod
    def convergence_iteration(history: Sequence[float]) -> Optional[int]:
        """
        大域最良が最終値に到達した最初の世代（1-indexed）

        Args:
            history: 世代ごとの大域最良長

        Returns:
            世代番号。経路が一度も見つかっていない場合はNone
        """
        if not history or not math.isfinite(history[-1]):
            return None
        final = history[-1]
        for i, value in enumerate(history):
            if value == final:
                return i + 1
        return None

    @staticmethod
    def success_rates(success_counts: Sequence[int], colony_size: int) -> List[float]:
        """世代ごとの成功率（ゴールに到達したアリの割合）"""
        if colony_size <= 0:
            raise ValueError(f"colony_size must be >= 1, got {colony_size}")
        return [count / colony_size for count in success_counts]

    @staticmethod
    def average_curve(histories: Sequence[Sequence[float]]) -> np.ndarray:
        """
        複数シミュレーションの大域最良長の平均推移

        経路未発見（inf）の世代は平均から除外し、全シミュレーションで未発見ならnanとします。

        Args:
            histories: シミュレーションごとの大域最良長の推移（同じ長さ）

        Returns:
            世代ごとの平均値
        """
        if not histories:
            return np.array([])
        data = np.array(histories, dtype=float)
        data[~np.isfinite(data)] = np.nan
        result = np.full(data.shape[1], np.nan)
        has_value = ~np.all(np.isnan(data), axis=0)
        result[has_value] = np.nanmean(data[:, has_value], axis=0)
        return result

    @staticmethod
    def is_non_increasing(history: Sequence[float]) -> bool:
        return all(b <= a for a, b in zip(history, history[1:]))
