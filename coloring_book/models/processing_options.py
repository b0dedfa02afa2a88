from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
import os

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class ProcessingMode(Enum):
    """Which pages a photo turns into."""

    COLORING = "coloring"
    PAINT_BY_NUMBERS = "paint-by-numbers"
    BOTH = "both"


class EdgeOperator(Enum):
    SOBEL = "sobel"  # gradient magnitude, the default
    LAPLACIAN = "laplacian"  # absolute second-derivative response


class PaletteSource(Enum):
    """
    Where the swatch palette of a paint-by-numbers page comes from.

    QUANTIZER: the quantizer's own K colours, ranked by pixel count.
    SAMPLED:   the palette orderer run over the quantized raster.
    """

    QUANTIZER = "quantizer"
    SAMPLED = "sampled"


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def _env_float(name: str, default: float) -> float:
    return float(os.getenv(name, str(default)))


@dataclass
class ProcessingOptions:
    """
    Value-object holding every tunable of the transform pipeline.
    Passed explicitly to each call; nothing is read from module globals.
    """
    max_dimension: int = 800         # long-edge bound D, never upscaled
    num_colors: int = 8              # K / N
    edge_threshold: float = 30.0     # T
    edge_amplify: float = 3.0        # A
    edge_operator: EdgeOperator = EdgeOperator.SOBEL
    iterations: int = 10             # quantizer iteration budget
    sample_size: int = 10_000        # quantizer sample bound
    palette_source: PaletteSource = PaletteSource.QUANTIZER
    seed: int | None = None          # None → seeded from system entropy

    def __post_init__(self):
        if self.max_dimension < 1:
            raise ValueError(f"max_dimension must be >= 1, got {self.max_dimension}")
        if self.num_colors < 1:
            raise ValueError(f"num_colors must be >= 1, got {self.num_colors}")
        if self.edge_threshold < 0:
            raise ValueError(f"edge_threshold must be >= 0, got {self.edge_threshold}")
        if self.edge_amplify < 0:
            raise ValueError(f"edge_amplify must be >= 0, got {self.edge_amplify}")
        if self.iterations < 0:
            raise ValueError(f"iterations must be >= 0, got {self.iterations}")
        if self.sample_size < 1:
            raise ValueError(f"sample_size must be >= 1, got {self.sample_size}")

    @classmethod
    def from_env(cls, **overrides) -> "ProcessingOptions":
        """
        Build options from environment variables (.env supported).
        Keyword arguments that are not None take precedence.
        """
        seed = os.getenv("RANDOM_SEED")
        values = dict(
            max_dimension=_env_int("MAX_DIMENSION", 800),
            num_colors=_env_int("NUM_COLORS", 8),
            edge_threshold=_env_float("EDGE_THRESHOLD", 30.0),
            edge_amplify=_env_float("EDGE_AMPLIFY", 3.0),
            edge_operator=EdgeOperator(os.getenv("EDGE_OPERATOR", EdgeOperator.SOBEL.value)),
            iterations=_env_int("QUANT_ITERATIONS", 10),
            sample_size=_env_int("QUANT_SAMPLE_SIZE", 10_000),
            palette_source=PaletteSource(os.getenv("PALETTE_SOURCE", PaletteSource.QUANTIZER.value)),
            seed=int(seed) if seed else None,
        )
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
