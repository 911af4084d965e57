"""
可視化モジュール

大域最良長の収束推移、成功率の推移、フェロモン濃度に応じたネットワーク図を保存します。
"""

from pathlib import Path
from typing import List, Optional, Sequence

import matplotlib.pyplot as plt
import networkx as nx
import numpy as np

from ..core.graph import CompleteGraph


class Visualizer:
    """可視化を行うクラス"""

    def __init__(self, output_dir: Path):
        """
        Args:
            output_dir: 出力ディレクトリ
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def _save(self, filename: str) -> Path:
        output_path = self.output_dir / filename
        plt.tight_layout()
        plt.savefig(output_path, dpi=150)
        plt.close()
        print(f"Saved: {output_path}")
        return output_path

    def plot_convergence(
        self,
        mean_curve: Sequence[float],
        optimal_length: Optional[float] = None,
        filename: str = "convergence.png",
    ) -> Path:
        """
        大域最良長（シミュレーション平均）の推移をプロット

        Args:
            mean_curve: 世代ごとの平均大域最良長（未発見はnan）
            optimal_length: 最短経路長（参考線として表示）
            filename: 保存するファイル名
        """
        fig, ax = plt.subplots(figsize=(10, 6))

        generations = list(range(1, len(mean_curve) + 1))
        ax.plot(generations, mean_curve, linestyle="-", linewidth=2, label="Best Length")
        if optimal_length is not None:
            ax.axhline(
                optimal_length, color="red", linestyle="--", label="Shortest Path"
            )

        ax.set_xlabel("Iteration", fontsize=12)
        ax.set_ylabel("Best Path Length", fontsize=12)
        ax.legend()
        ax.grid(True, alpha=0.3)

        return self._save(filename)

    def plot_success_rate(
        self,
        success_rates: Sequence[float],
        filename: str = "success_rate.png",
    ) -> Path:
        """
        ゴールに到達したアリの割合の推移をプロット

        Args:
            success_rates: 世代ごとの成功率（0.0 ~ 1.0）
            filename: 保存するファイル名
        """
        fig, ax = plt.subplots(figsize=(10, 6))

        generations = list(range(1, len(success_rates) + 1))
        ax.plot(generations, [rate * 100 for rate in success_rates], linewidth=2)

        ax.set_xlabel("Iteration", fontsize=12)
        ax.set_ylabel("Successful Ants (%)", fontsize=12)
        ax.set_ylim(0, 105)
        ax.grid(True, alpha=0.3)

        return self._save(filename)

    def plot_pheromone_network(
        self,
        graph: CompleteGraph,
        pheromone: np.ndarray,
        best_path: Optional[List[int]] = None,
        filename: str = "pheromone_network.png",
    ) -> Path:
        """
        フェロモン濃度をエッジの太さ・濃さで表したネットワーク図

        Args:
            graph: 完全グラフ（ノード座標を持つこと）
            pheromone: フェロモン行列のスナップショット
            best_path: 強調表示する大域最良経路
            filename: 保存するファイル名
        """
        nx_graph = graph.to_networkx()
        if graph.positions is not None:
            pos = {i: graph.positions[i] for i in nx_graph.nodes()}
        else:
            pos = nx.circular_layout(nx_graph)

        edges = list(nx_graph.edges())
        values = np.array([pheromone[u, v] for u, v in edges])
        span = values.max() - values.min() if len(values) else 0.0
        if span > 0:
            intensity = (values - values.min()) / span
        else:
            intensity = np.full(len(values), 0.1)

        fig, ax = plt.subplots(figsize=(10, 8))
        nx.draw_networkx_edges(
            nx_graph,
            pos,
            edgelist=edges,
            width=list(1 + intensity * 4),
            edge_color=[(1.0, 0.4, 0.4, 0.1 + i * 0.6) for i in intensity],
            arrows=graph.directed,
            ax=ax,
        )
        if best_path and len(best_path) > 1:
            nx.draw_networkx_edges(
                nx_graph,
                pos,
                edgelist=list(zip(best_path[:-1], best_path[1:])),
                width=4,
                edge_color="#3ddc84",
                arrows=graph.directed,
                ax=ax,
            )

        colors = []
        for node in nx_graph.nodes():
            if node == graph.start_node:
                colors.append("#3ddc84")
            elif node == graph.end_node:
                colors.append("#ff6b6b")
            else:
                colors.append("#cccccc")
        nx.draw_networkx_nodes(nx_graph, pos, node_color=colors, node_size=200, ax=ax)
        nx.draw_networkx_labels(nx_graph, pos, font_size=8, ax=ax)

        ax.invert_yaxis()
        ax.set_axis_off()

        return self._save(filename)
