"""CertiStage billing core: plan catalog, pro-rata upgrade pricing and upgrade orders."""
from .core.pricing import ProRataResult, calculate_pro_rata_upgrade

__all__ = ["ProRataResult", "calculate_pro_rata_upgrade"]
