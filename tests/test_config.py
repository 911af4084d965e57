"""
設定モジュールのテスト
"""

from pathlib import Path

import pytest
import yaml

from aco_colony.config import ColonyConfig, load_colony_config, load_config

CONFIG_PATH = Path(__file__).parent.parent / "config" / "config.yaml"


class TestColonyConfig:
    """ColonyConfigクラスのテスト"""

    def test_defaults(self):
        """既定値"""
        config = ColonyConfig()
        assert config.node_count == 10
        assert config.alpha == 1.0
        assert config.beta == 2.0
        assert config.rho == 0.5
        assert config.q == 1.0
        assert config.colony_size == 10
        assert config.tau0 == 1.0
        assert config.directed is False
        assert config.start_distribution == "uniform"
        assert config.seed == 42

    def test_boundary_values(self):
        """境界値（ρ=1、α=0、β=0）は許可"""
        config = ColonyConfig(rho=1.0, alpha=0.0, beta=0.0, node_count=2, colony_size=1)
        assert config.rho == 1.0

    @pytest.mark.parametrize(
        "changes",
        [
            {"node_count": 1},
            {"node_count": 2.5},
            {"colony_size": 0},
            {"rho": 0.0},
            {"rho": 1.01},
            {"q": 0.0},
            {"tau0": -1.0},
            {"alpha": -0.5},
            {"beta": -1.0},
            {"start_distribution": "gaussian"},
            {"directed": "yes"},
            {"max_iterations": 0},
            {"step_interval": 0.0},
            {"seed": "abc"},
            {"region_width": 100.0},
        ],
    )
    def test_invalid_values(self, changes):
        """範囲外の値は丸めずに拒否"""
        with pytest.raises(ValueError):
            ColonyConfig(**changes)

    def test_updated(self):
        """updated()は新しい設定を返し、元の設定は変えない"""
        config = ColonyConfig()
        new_config = config.updated(alpha=3.0)

        assert new_config.alpha == 3.0
        assert config.alpha == 1.0

    def test_updated_unknown_key(self):
        """未知のキーは拒否"""
        with pytest.raises(ValueError, match="Unknown colony parameter"):
            ColonyConfig().updated(speed=100)

    def test_from_dict(self):
        """辞書から生成（整数値も実数として受け付ける）"""
        config = ColonyConfig.from_dict({"alpha": 2, "rho": 1, "directed": True})
        assert config.alpha == 2
        assert config.rho == 1
        assert config.directed is True

    def test_from_dict_unknown_key(self):
        """未知のキーは拒否"""
        with pytest.raises(ValueError):
            ColonyConfig.from_dict({"alpha": 1.0, "colonySize": 5})

    def test_to_dict_round_trip(self):
        """to_dict()の結果から同じ設定を復元できる"""
        config = ColonyConfig(node_count=7, beta=3.0)
        assert ColonyConfig.from_dict(config.to_dict()) == config


class TestLoadConfig:
    """設定ファイル読み込みのテスト"""

    def test_repository_config(self):
        """リポジトリ同梱のconfig.yamlが読み込める"""
        config = load_config(CONFIG_PATH)
        assert "experiment" in config
        assert "output" in config

        colony_config = load_colony_config(CONFIG_PATH)
        assert isinstance(colony_config, ColonyConfig)

    def test_load_colony_config(self, tmp_path):
        """colonyセクションからColonyConfigを生成"""
        path = tmp_path / "config.yaml"
        path.write_text(
            yaml.safe_dump({"colony": {"node_count": 6, "start_distribution": "fixed"}}),
            encoding="utf-8",
        )

        config = load_colony_config(path)
        assert config.node_count == 6
        assert config.start_distribution == "fixed"
        assert config.alpha == 1.0

    def test_load_empty_file(self, tmp_path):
        """空のファイルなら既定値"""
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")

        assert load_config(path) == {}
        assert load_colony_config(path) == ColonyConfig()

    def test_load_unknown_key(self, tmp_path):
        """colonyセクションの未知のキーは拒否"""
        path = tmp_path / "config.yaml"
        path.write_text("colony:\n  evaporation: 0.5\n", encoding="utf-8")

        with pytest.raises(ValueError):
            load_colony_config(path)
