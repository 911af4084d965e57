"""
コロニー設定モジュール

ACOエンジンが認識する全パラメータを明示的に列挙したデータクラスと、
config.yaml からの読み込み処理を提供します。

【設定項目と反映タイミング】
- alpha, beta, rho, q, colony_size, start_distribution, max_iterations:
  次の step() から即座に反映
- tau0, directed: フェロモン行列の不変条件を保つため、暗黙のリセットを伴う
- node_count, seed, region_width, region_height, margin: グラフを再生成
- step_interval: 自動実行の周期を再設定
"""

from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Dict, Union

import yaml

START_FIXED = "fixed"
START_UNIFORM = "uniform"
START_DISTRIBUTIONS = (START_FIXED, START_UNIFORM)

# フェロモン行列の再初期化が必要なパラメータ（暗黙のリセット）
RESET_FIELDS = frozenset({"tau0", "directed"})
# グラフの再生成が必要なパラメータ
GRAPH_FIELDS = frozenset(
    {"node_count", "seed", "region_width", "region_height", "margin"}
)
SCHEDULE_FIELDS = frozenset({"step_interval"})


@dataclass
class ColonyConfig:
    """
    コロニー設定

    Attributes:
        node_count (int): ノード数（2以上）
        alpha (float): フェロモンの影響指数（0以上。0ならフェロモンを無視）
        beta (float): ヒューリスティック（距離の逆数）の影響指数（0以上）
        rho (float): 揮発率 (0, 1]
        q (float): フェロモン付加強度（正）
        colony_size (int): 1世代あたりのアリ数 m（1以上）
        tau0 (float): フェロモン初期値（正）
        directed (bool): 有向グラフとして扱うか（Falseならフェロモンを対称に保つ）
        start_distribution (str): スタートノードの選び方 "fixed" | "uniform"
        seed (int): 乱数シード
        max_iterations (int): 自動実行時の世代数上限
        step_interval (float): 自動実行時のステップ間隔（秒）
        region_width (float): ノード配置領域の幅
        region_height (float): ノード配置領域の高さ
        margin (float): 配置領域の余白
    """

    node_count: int = 10
    alpha: float = 1.0
    beta: float = 2.0
    rho: float = 0.5
    q: float = 1.0
    colony_size: int = 10
    tau0: float = 1.0
    directed: bool = False
    start_distribution: str = START_UNIFORM
    seed: int = 42
    max_iterations: int = 100
    step_interval: float = 1.0
    region_width: float = 800.0
    region_height: float = 600.0
    margin: float = 50.0

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """
        設定値を検証します。

        Raises:
            ValueError: 範囲外の値が含まれる場合（値の丸め込みは行いません）
        """
        if not _is_int(self.node_count) or self.node_count < 2:
            raise ValueError(f"node_count must be an integer >= 2, got {self.node_count!r}")
        if not _is_int(self.colony_size) or self.colony_size < 1:
            raise ValueError(
                f"colony_size must be an integer >= 1, got {self.colony_size!r}"
            )
        if not _is_int(self.max_iterations) or self.max_iterations < 1:
            raise ValueError(
                f"max_iterations must be an integer >= 1, got {self.max_iterations!r}"
            )
        if not _is_int(self.seed):
            raise ValueError(f"seed must be an integer, got {self.seed!r}")
        if not _is_real(self.alpha) or self.alpha < 0:
            raise ValueError(f"alpha must be >= 0, got {self.alpha!r}")
        if not _is_real(self.beta) or self.beta < 0:
            raise ValueError(f"beta must be >= 0, got {self.beta!r}")
        if not _is_real(self.rho) or not 0.0 < self.rho <= 1.0:
            raise ValueError(f"rho must be in (0, 1], got {self.rho!r}")
        if not _is_real(self.q) or self.q <= 0:
            raise ValueError(f"q must be > 0, got {self.q!r}")
        if not _is_real(self.tau0) or self.tau0 <= 0:
            raise ValueError(f"tau0 must be > 0, got {self.tau0!r}")
        if not isinstance(self.directed, bool):
            raise ValueError(f"directed must be a bool, got {self.directed!r}")
        if self.start_distribution not in START_DISTRIBUTIONS:
            raise ValueError(
                f"start_distribution must be one of {START_DISTRIBUTIONS}, "
                f"got {self.start_distribution!r}"
            )
        if not _is_real(self.step_interval) or self.step_interval <= 0:
            raise ValueError(f"step_interval must be > 0, got {self.step_interval!r}")
        if not _is_real(self.margin) or self.margin < 0:
            raise ValueError(f"margin must be >= 0, got {self.margin!r}")
        for name in ("region_width", "region_height"):
            value = getattr(self, name)
            if not _is_real(value) or value <= 2 * self.margin:
                raise ValueError(
                    f"{name} must be larger than 2 * margin ({2 * self.margin}), "
                    f"got {value!r}"
                )

    def updated(self, **changes) -> "ColonyConfig":
        """
        変更を適用した新しい設定を返します（自身は変更しません）。

        Args:
            **changes: 変更するフィールドと値

        Returns:
            検証済みの新しいColonyConfig

        Raises:
            ValueError: 未知のキー、または不正な値が含まれる場合
        """
        unknown = set(changes) - self.field_names()
        if unknown:
            raise ValueError(f"Unknown colony parameter(s): {sorted(unknown)}")
        return replace(self, **changes)

    @classmethod
    def field_names(cls) -> frozenset:
        return frozenset(f.name for f in fields(cls))

    @classmethod
    def from_dict(cls, data: Dict) -> "ColonyConfig":
        """
        辞書（config.yamlのcolonyセクション）から設定を生成します。

        Raises:
            ValueError: 未知のキーが含まれる場合
        """
        data = dict(data or {})
        unknown = set(data) - cls.field_names()
        if unknown:
            raise ValueError(f"Unknown colony parameter(s): {sorted(unknown)}")
        return cls(**data)

    def to_dict(self) -> Dict:
        return asdict(self)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_real(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def load_config(config_path: Union[str, Path]) -> dict:
    """
    設定ファイルを読み込む

    Args:
        config_path: 設定ファイルのパス

    Returns:
        設定辞書
    """
    with open(config_path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f)
    return config or {}


def load_colony_config(config_path: Union[str, Path]) -> ColonyConfig:
    """設定ファイルのcolonyセクションからColonyConfigを生成"""
    config = load_config(config_path)
    return ColonyConfig.from_dict(config.get("colony", {}))
