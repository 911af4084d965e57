"""
フェロモン行列モジュール

【フェロモン更新のタイミング】
1. 世代内の全アリが経路を構築し終えるまで、行列は変更されない（構築時は更新前の値を参照）
2. 全エッジを揮発率ρで揮発させる：τ ← max(τ(1-ρ), τ_min)
3. ゴールに到達したアリの経路上の各エッジにΔτ = Q / L を付加

【不変条件】
- 全要素は τ_min 以上（確率0による固定化を防ぐ）
- 無向グラフでは τ_ij == τ_ji
"""

from typing import Optional, Sequence

import numpy as np

# フェロモンの下限値
MIN_PHEROMONE = 1e-10


class PheromoneField:
    """
    フェロモン濃度のN×N行列を管理するクラス

    Attributes:
        matrix (np.ndarray): フェロモン行列（matrix[i, j] はエッジ i→j の濃度）
        directed (bool): 有向かどうか（Falseなら更新を対称に反映）
        tau0 (float): 初期値
        min_pheromone (float): 下限値

    Example:
        >>> field = PheromoneField(node_count=3, tau0=1.0)
        >>> field.evaporate(0.5)
        >>> field.value(0, 1)
        0.5
        >>> field.reinforce([0, 1, 2], delta_tau=0.25)
        >>> field.value(1, 0)
        0.75
    """

    def __init__(
        self,
        node_count: int,
        tau0: float = 1.0,
        directed: bool = False,
        min_pheromone: float = MIN_PHEROMONE,
    ):
        self.min_pheromone = min_pheromone
        self.initialize(node_count, tau0, directed)

    def initialize(self, node_count: int, tau0: float, directed: bool) -> None:
        """
        全ての順序対 i≠j を τ0 に初期化します（無向の場合は対称）。

        Args:
            node_count: ノード数（2以上）
            tau0: 初期値（正）
            directed: 有向かどうか

        Raises:
            ValueError: node_countが2未満、またはtau0が正でない場合
        """
        if isinstance(node_count, bool) or not isinstance(node_count, int) or node_count < 2:
            raise ValueError(f"node_count must be an integer >= 2, got {node_count!r}")
        if not tau0 > 0:
            raise ValueError(f"tau0 must be > 0, got {tau0!r}")

        # 対角成分も τ0 で埋める（遷移には使われない）
        self.matrix = np.full((node_count, node_count), float(tau0))
        self.tau0 = float(tau0)
        self.directed = directed

    def evaporate(self, rho: float) -> None:
        """
        全エッジのフェロモンを揮発させます。

        Args:
            rho: 揮発率 (0, 1]。1.0なら全要素が下限値まで落ちます

        Raises:
            ValueError: rhoが範囲外の場合
        """
        if not 0.0 < rho <= 1.0:
            raise ValueError(f"rho must be in (0, 1], got {rho!r}")
        self.matrix *= 1.0 - rho
        np.maximum(self.matrix, self.min_pheromone, out=self.matrix)

    def reinforce(
        self, path: Sequence[int], delta_tau: float, directed: Optional[bool] = None
    ) -> None:
        """
        経路上の各エッジにフェロモンを付加します。

        ゴールに到達した経路に対してのみ呼び出してください（判定は呼び出し側）。

        Args:
            path: ノード列
            delta_tau: 付加量（正）
            directed: 有向として扱うか。Noneなら初期化時の設定に従う
        """
        if directed is None:
            directed = self.directed
        for u, v in zip(path[:-1], path[1:]):
            self.matrix[u, v] += delta_tau
            if not directed:
                self.matrix[v, u] += delta_tau

    def value(self, i: int, j: int) -> float:
        return float(self.matrix[i, j])

    def snapshot(self) -> np.ndarray:
        """可視化用の読み取り専用コピーを返します。"""
        copy = self.matrix.copy()
        copy.setflags(write=False)
        return copy

    def off_diagonal(self) -> np.ndarray:
        """対角成分を除いた値の一次元配列"""
        mask = ~np.eye(self.node_count, dtype=bool)
        return self.matrix[mask]

    def minimum(self) -> float:
        return float(self.off_diagonal().min())

    def maximum(self) -> float:
        return float(self.off_diagonal().max())

    def is_symmetric(self) -> bool:
        return bool(np.array_equal(self.matrix, self.matrix.T))

    @property
    def node_count(self) -> int:
        return self.matrix.shape[0]

    def __repr__(self) -> str:
        kind = "directed" if self.directed else "undirected"
        return (
            f"PheromoneField(nodes={self.node_count}, {kind}, "
            f"min={self.minimum():.3g}, max={self.maximum():.3g})"
        )
