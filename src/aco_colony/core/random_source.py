"""
決定論的乱数生成モジュール

シード値から再現可能な一様乱数列を生成します。

【再現性の方針】
ACOエンジン内部の確率的な判断（ノード配置、次ノード選択、スタートノードの一様選択）は
全てこのクラスの単一インスタンスから乱数を引きます。
これにより (seed, グラフ, パラメータ) が同じであれば、実行全体が完全に再現されます。
"""


class DeterministicRandom:
    """
    線形合同法（LCG）による疑似乱数生成器

    s ← (s * 9301 + 49297) mod 233280 を更新式とし、s / 233280 を返します。
    周期は短いものの、可視化・教育用途での再現性を優先した生成器です。

    Attributes:
        seed (int): 初期シード値
        state (int): 現在の内部状態

    Example:
        >>> rng = DeterministicRandom(42)
        >>> 0.0 <= rng.next() < 1.0
        True
    """

    MULTIPLIER = 9301
    INCREMENT = 49297
    MODULUS = 233280

    def __init__(self, seed: int = 42):
        """
        Args:
            seed: 初期シード値（整数）
        """
        self.seed = seed
        self.state = self._normalize(seed)

    def _normalize(self, seed: int) -> int:
        if isinstance(seed, bool) or not isinstance(seed, int):
            raise ValueError(f"seed must be an integer, got {seed!r}")
        return seed % self.MODULUS

    def next(self) -> float:
        """
        次の一様乱数を返します。

        Returns:
            [0, 1) の範囲の浮動小数点数
        """
        self.state = (self.state * self.MULTIPLIER + self.INCREMENT) % self.MODULUS
        return self.state / self.MODULUS

    def randrange(self, n: int) -> int:
        """[0, n) の整数を一様に選択（floor(next() * n)）"""
        return int(self.next() * n)

    def reseed(self, seed: int) -> None:
        """
        シードを再設定し、乱数列を先頭から再生成できる状態に戻します。

        Args:
            seed: 新しいシード値
        """
        self.state = self._normalize(seed)
        self.seed = seed

    def __repr__(self) -> str:
        return f"DeterministicRandom(seed={self.seed}, state={self.state})"
