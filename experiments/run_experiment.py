"""
実験実行スクリプト

config.yamlの設定に基づき、ACOシミュレーションを複数回実行し、
厳密な最短経路（Dijkstra法）と比較評価を行います。
"""

import argparse
import csv
import sys
from datetime import datetime
from pathlib import Path

# プロジェクトルートをPythonパスに追加
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

from aco_colony.config import ColonyConfig, load_config
from aco_colony.simulation.controller import SimulationController
from aco_colony.utils.metrics import MetricsCalculator
from aco_colony.utils.visualization import Visualizer


def run_single_simulation(
    colony_config: ColonyConfig,
    sim: int,
    num_simulations: int,
    generations: int,
    metrics_calculator: MetricsCalculator,
) -> dict:
    """
    1回のシミュレーションを実行

    Args:
        colony_config: コロニー設定（シードはシミュレーション番号でずらす）
        sim: シミュレーション番号（0-indexed）
        num_simulations: 総シミュレーション数
        generations: 世代数
        metrics_calculator: 評価指標計算オブジェクト

    Returns:
        {"history", "success_counts", "optimal_length", "best_length", "best_path"}
    """
    print(f"\n{'='*80}")
    print(f"Simulation {sim + 1}/{num_simulations}")
    print(f"{'='*80}")

    config = colony_config.updated(seed=colony_config.seed + sim)
    controller = SimulationController(config)
    graph = controller.graph
    print(f"Seed: {config.seed}, Start: {graph.start_node}, Goal: {graph.end_node}")

    optimal_length = metrics_calculator.optimal_length(graph)
    print(f"  Shortest Path Length: {optimal_length:.2f}")

    success_counts = []
    for _ in range(generations):
        result = controller.step()
        success_counts.append(result.success_count)

    history = list(controller.state.best_length_history)
    best_length = controller.best_length
    error = metrics_calculator.relative_error(best_length, optimal_length)
    convergence = metrics_calculator.convergence_iteration(history)

    print(f"Best Path: {controller.best_path}")
    print(f"Best Length: {best_length:.2f} (relative error {error:.3f})")
    print(f"Converged at iteration: {convergence}")

    return {
        "history": history,
        "success_counts": success_counts,
        "optimal_length": optimal_length,
        "best_length": best_length,
        "best_path": controller.best_path,
        "controller": controller,
    }


def save_and_visualize_results(
    config: dict,
    colony_config: ColonyConfig,
    results: list,
    metrics_calculator: MetricsCalculator,
    visualizer: Visualizer,
) -> None:
    """
    結果を集計し、可視化する

    Args:
        config: 設定辞書
        colony_config: コロニー設定
        results: run_single_simulationの戻り値のリスト
        metrics_calculator: 評価指標計算オブジェクト
        visualizer: Visualizerオブジェクト
    """
    print(f"\n{'='*80}")
    print("Summary of All Simulations")
    print(f"{'='*80}")

    optimal_count = sum(
        1
        for r in results
        if metrics_calculator.is_optimal(r["best_length"], r["optimal_length"])
    )
    found_count = sum(1 for r in results if r["best_path"] is not None)
    print(f"Path Found: {found_count}/{len(results)}")
    print(f"Shortest Path Found: {optimal_count}/{len(results)}")

    if not config["output"]["save_graphs"] or not results:
        return

    # 相対誤差の推移（シミュレーションごとに最短経路長が異なるため正規化）
    normalized = [
        [length / r["optimal_length"] for length in r["history"]]
        for r in results
        if r["optimal_length"] > 0
    ]
    visualizer.plot_convergence(
        metrics_calculator.average_curve(normalized),
        optimal_length=1.0,
        filename="convergence.png",
    )

    rates = [
        metrics_calculator.success_rates(r["success_counts"], colony_config.colony_size)
        for r in results
    ]
    mean_rates = [sum(column) / len(column) for column in zip(*rates)]
    visualizer.plot_success_rate(mean_rates, filename="success_rate.png")

    last = results[-1]["controller"]
    visualizer.plot_pheromone_network(
        last.graph,
        last.pheromone_snapshot(),
        best_path=last.best_path,
        filename="pheromone_network.png",
    )


def main(argv=None):
    """メイン実験ループ"""
    parser = argparse.ArgumentParser(description="ACO shortest path experiment")
    parser.add_argument(
        "--config",
        type=Path,
        default=project_root / "config" / "config.yaml",
        help="設定ファイルのパス",
    )
    parser.add_argument("--simulations", type=int, help="シミュレーション回数の上書き")
    parser.add_argument("--generations", type=int, help="世代数の上書き")
    args = parser.parse_args(argv)

    # ===== 設定読み込み =====
    config = load_config(args.config)
    colony_config = ColonyConfig.from_dict(config.get("colony", {}))

    num_simulations = args.simulations or config["experiment"]["simulations"]
    generations = args.generations or config["experiment"]["generations"]

    print("=" * 80)
    print(f"Experiment: {config['experiment']['name']}")
    print(
        f"alpha={colony_config.alpha}, beta={colony_config.beta}, "
        f"rho={colony_config.rho}, Q={colony_config.q}, m={colony_config.colony_size}"
    )
    print("=" * 80)

    # ===== 出力ディレクトリの作成 =====
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    results_dir = project_root / config["output"]["results_dir"] / timestamp
    results_dir.mkdir(parents=True, exist_ok=True)
    print(f"Results directory: {results_dir}\n")

    log_csv_path = results_dir / "log_best_length.csv"

    visualizer = Visualizer(results_dir)
    metrics_calculator = MetricsCalculator()

    # ===== シミュレーション実行 =====
    results = []
    for sim in range(num_simulations):
        result = run_single_simulation(
            colony_config, sim, num_simulations, generations, metrics_calculator
        )

        # CSVログに書き込み（1行 = 1シミュレーションの世代ごとの大域最良長）
        with open(log_csv_path, "a", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(result["history"])

        results.append(result)

    # ===== 結果の集計と可視化 =====
    save_and_visualize_results(
        config, colony_config, results, metrics_calculator, visualizer
    )

    print(f"\n✅ Experiment completed! Results saved to: {results_dir}")
    print(f"📊 CSV Log: {log_csv_path}")


if __name__ == "__main__":
    main()
