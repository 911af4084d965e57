"""
アリ（Ant）クラス

ACOにおける探索エージェントを表現するモジュール。

【アリの役割】
スタートノードから未訪問ノードを確率的に辿り、ゴールノードを目指す。
経路（訪問順のノード列）と累積距離を記録し、世代終了後に成功・失敗と経路長が集計される。

【成功条件】
経路の最後のノードがゴールノードと一致すること。
未訪問ノードが尽きた場合や、遷移重みが全て無効な場合（行き止まり）は失敗となる。
"""

import math
from typing import List, Tuple


class Ant:
    """
    ACOにおけるアリを表現するクラス

    Attributes:
        ant_id (int): アリの識別子（世代内で一意）
        start_node (int): 開始ノードID
        destination_node (int): 目的地ノードID
        current_node (int): 現在のノードID
        route (List[int]): 訪問済みノードのリスト（タブーリスト）
        total_distance (float): 累積距離

    Example:
        >>> ant = Ant(ant_id=0, start_node=0, destination_node=2)
        >>> ant.move_to(next_node=1, distance=3.0)
        >>> ant.has_reached_goal()
        False
        >>> ant.move_to(next_node=2, distance=4.0)
        >>> ant.path_length
        7.0
    """

    def __init__(self, ant_id: int, start_node: int, destination_node: int):
        """
        Args:
            ant_id: アリの識別子
            start_node: 開始ノードID
            destination_node: 目的地ノードID
        """
        self.ant_id = ant_id
        self.start_node = start_node
        self.destination_node = destination_node
        self.current_node = start_node

        # 経路記憶（タブーリスト）
        self.route: List[int] = [start_node]
        self._visited = {start_node}

        # 累積距離
        self.total_distance: float = 0.0

    def move_to(self, next_node: int, distance: float) -> None:
        """
        次のノードへ移動し、累積距離を更新します。

        Args:
            next_node: 移動先ノードID
            distance: 移動に使用したエッジの距離
        """
        self.route.append(next_node)
        self._visited.add(next_node)
        self.current_node = next_node
        self.total_distance += distance

    def has_visited(self, node: int) -> bool:
        return node in self._visited

    def visited_count(self) -> int:
        return len(self._visited)

    def has_reached_goal(self) -> bool:
        """
        目的地に到達したかチェックします。

        スタートノード自体が目的地の場合（一様スタートで偶然選ばれた場合）も
        到達済みとみなしますが、経路長がinfになるためフェロモンは付加されません。
        """
        return self.current_node == self.destination_node

    @property
    def path_length(self) -> float:
        """経路長。ノードが2つ未満の場合はinf"""
        if len(self.route) < 2:
            return math.inf
        return self.total_distance

    def get_route_edges(self) -> List[Tuple[int, int]]:
        """
        経路のエッジリストを取得します。

        Example:
            >>> ant = Ant(0, 0, 3)
            >>> ant.route = [0, 1, 2, 3]
            >>> ant.get_route_edges()
            [(0, 1), (1, 2), (2, 3)]
        """
        return [(self.route[i], self.route[i + 1]) for i in range(len(self.route) - 1)]

    def __repr__(self) -> str:
        return (
            f"Ant(id={self.ant_id}, current={self.current_node}, "
            f"route_len={len(self.route)}, L={self.path_length:.1f}, "
            f"success={self.has_reached_goal()})"
        )
