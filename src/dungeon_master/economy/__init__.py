from .wallet import DPChanged, DPWallet

__all__ = ["DPChanged", "DPWallet"]
