"""Global constants for meshsdf.

Exports:
    DEFAULT_MERGE_TOLERANCE (float): Grid spacing used to merge coincident
        vertices of a triangle soup.
    DEGENERATE_TOLERANCE (float): Edge-length slack below which a triangle is
        reported degenerate.
    NORMAL_STEP (float): Central-difference step for SDF gradients.
    LOG_FORMAT, LOG_DATEFMT (str): Formatter settings for setup_logging.
"""

DEFAULT_MERGE_TOLERANCE: float = 1e-4
DEGENERATE_TOLERANCE: float = 1e-12
NORMAL_STEP: float = 1e-5

LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATEFMT: str = "%H:%M:%S"
