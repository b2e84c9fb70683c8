from clauseguard.models.analysis import ContractAnalysis

__all__ = ["ContractAnalysis"]
