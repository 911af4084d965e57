"""
グラフモジュール

2次元平面上に散布したノードからなる完全グラフを生成・管理します。

【主要機能】
1. グラフ生成：決定論的乱数でノードを配置し、ユークリッド距離行列を計算
2. スタート・ゴール選択：最大距離のノード対（行優先走査で最初に見つかったもの）
3. ヒューリスティック行列：η = 1 / max(d, ε)（可視化用スナップショット）
4. NetworkXへの変換：プロットや検証用
"""

import math
from typing import List, Optional, Sequence, Tuple

import networkx as nx
import numpy as np

from .random_source import DeterministicRandom

# 一致するノード間の距離による0除算を防ぐ下限
DISTANCE_EPSILON = 1e-10


class CompleteGraph:
    """
    ACO経路探索用の完全グラフ

    全ての異なるノード対がエッジで結ばれています。距離行列は生成時に一度だけ計算され、
    以降は読み取り専用です。

    Attributes:
        positions (List[Tuple[float, float]]): 各ノードの座標（距離の導出にのみ使用）
        distances (np.ndarray): N×Nの距離行列（読み取り専用）
        directed (bool): 有向グラフかどうか
        start_node (int): スタートノード
        end_node (int): ゴールノード

    Example:
        >>> graph = CompleteGraph.from_positions([(0, 0), (3, 4), (1, 1)])
        >>> graph.start_node, graph.end_node
        (0, 1)
        >>> graph.distance(0, 1)
        5.0
    """

    def __init__(
        self,
        distances: np.ndarray,
        positions: Optional[Sequence[Tuple[float, float]]] = None,
        directed: bool = False,
    ):
        """
        Args:
            distances: N×Nの距離行列（非負、対角成分0）
            positions: ノード座標（省略可）
            directed: 有向グラフかどうか

        Raises:
            ValueError: ノード数が2未満、行列が正方でない、負の距離、
                        無向なのに非対称な行列が与えられた場合
        """
        matrix = np.array(distances, dtype=float)
        if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
            raise ValueError(f"distance matrix must be square, got shape {matrix.shape}")
        if matrix.shape[0] < 2:
            raise ValueError(f"node_count must be >= 2, got {matrix.shape[0]}")
        if np.any(np.isnan(matrix)) or np.any(matrix < 0):
            raise ValueError("distances must be non-negative numbers")
        if np.any(np.diag(matrix) != 0):
            raise ValueError("distance(i, i) must be 0")
        if not directed and not np.array_equal(matrix, matrix.T):
            raise ValueError("an undirected graph requires a symmetric distance matrix")
        if positions is not None and len(positions) != matrix.shape[0]:
            raise ValueError("positions and distance matrix sizes differ")

        matrix.setflags(write=False)
        self.distances = matrix
        self.positions = (
            [(float(x), float(y)) for x, y in positions] if positions is not None else None
        )
        self.directed = directed
        self.start_node, self.end_node = self._select_terminals()

    @classmethod
    def generate(
        cls,
        node_count: int,
        seed: int,
        directed: bool = False,
        width: float = 800.0,
        height: float = 600.0,
        margin: float = 50.0,
        rng: Optional[DeterministicRandom] = None,
    ) -> "CompleteGraph":
        """
        ノードをランダムに配置して完全グラフを生成します。

        Args:
            node_count: ノード数（2以上）
            seed: 乱数シード（rng未指定時に使用）
            directed: 有向グラフかどうか
            width: 配置領域の幅
            height: 配置領域の高さ
            margin: 領域の余白
            rng: 使用する乱数生成器。指定した場合はseedで再シードしてから使用します

        Returns:
            生成されたCompleteGraph

        Raises:
            ValueError: node_countが2未満の場合
        """
        if isinstance(node_count, bool) or not isinstance(node_count, int) or node_count < 2:
            raise ValueError(f"node_count must be an integer >= 2, got {node_count!r}")

        if rng is None:
            rng = DeterministicRandom(seed)
        else:
            rng.reseed(seed)

        positions = []
        for _ in range(node_count):
            x = rng.next() * (width - 2 * margin) + margin
            y = rng.next() * (height - 2 * margin) + margin
            positions.append((x, y))

        return cls.from_positions(positions, directed=directed)

    @classmethod
    def from_positions(
        cls, positions: Sequence[Tuple[float, float]], directed: bool = False
    ) -> "CompleteGraph":
        """座標リストからユークリッド距離の完全グラフを生成"""
        n = len(positions)
        matrix = np.zeros((n, n), dtype=float)
        for i in range(n):
            for j in range(n):
                if i != j:
                    matrix[i, j] = math.hypot(
                        positions[i][0] - positions[j][0],
                        positions[i][1] - positions[j][1],
                    )
        return cls(matrix, positions=positions, directed=directed)

    @classmethod
    def from_distance_matrix(
        cls, distances: Sequence[Sequence[float]], directed: bool = False
    ) -> "CompleteGraph":
        """明示的な距離行列から生成（有向の場合のみ非対称を許可）"""
        return cls(np.asarray(distances, dtype=float), directed=directed)

    def _select_terminals(self) -> Tuple[int, int]:
        """
        最大距離のノード対をスタート・ゴールとして選択します。

        i < j の行優先走査で、厳密に大きい距離が見つかった時のみ更新します
        （同距離の場合は最初に見つかった対を採用）。
        全距離が0の場合は (0, 1) を返します。
        """
        start, end = 0, 1
        max_distance = 0.0
        n = self.num_nodes
        for i in range(n):
            for j in range(i + 1, n):
                d = self.distances[i, j]
                if d > max_distance:
                    max_distance = d
                    start, end = i, j
        return start, end

    @property
    def num_nodes(self) -> int:
        return self.distances.shape[0]

    def distance(self, i: int, j: int) -> float:
        return float(self.distances[i, j])

    def path_length(self, path: Sequence[int]) -> float:
        """
        経路長（連続するノード間距離の和）を計算します。

        Args:
            path: ノード列

        Returns:
            経路長。ノードが2つ未満の場合はinf
        """
        if len(path) < 2:
            return math.inf
        return sum(self.distance(path[i], path[i + 1]) for i in range(len(path) - 1))

    def max_distance(self) -> float:
        return float(self.distances.max())

    def heuristic_matrix(self) -> np.ndarray:
        """
        ヒューリスティック行列 η_ij = 1 / max(d_ij, ε) を返します（対角成分は0）。

        Returns:
            読み取り専用のN×N配列
        """
        eta = 1.0 / np.maximum(self.distances, DISTANCE_EPSILON)
        np.fill_diagonal(eta, 0.0)
        eta.setflags(write=False)
        return eta

    def to_networkx(self) -> nx.Graph:
        """
        NetworkXのグラフに変換します。

        Returns:
            エッジ属性 "distance"、ノード属性 "pos" を持つ完全グラフ
            （有向の場合はDiGraph）
        """
        graph = nx.DiGraph() if self.directed else nx.Graph()
        for i in range(self.num_nodes):
            if self.positions is not None:
                graph.add_node(i, pos=self.positions[i])
            else:
                graph.add_node(i)
        for i in range(self.num_nodes):
            for j in range(self.num_nodes):
                if i == j or (not self.directed and j < i):
                    continue
                graph.add_edge(i, j, distance=self.distance(i, j))
        return graph

    def nodes(self) -> List[int]:
        return list(range(self.num_nodes))

    def __repr__(self) -> str:
        kind = "directed" if self.directed else "undirected"
        return (
            f"CompleteGraph(nodes={self.num_nodes}, {kind}, "
            f"start={self.start_node}, end={self.end_node})"
        )
