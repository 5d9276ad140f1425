import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


def _parse_bool(value: str | None, default: bool = False) -> bool:
    if value is None or not value.strip():
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _parse_float(value: str | None, default: float) -> float:
    if value is None or not value.strip():
        return default
    return float(value)


@dataclass
class Settings:
    # signing / chain
    RPC_URL_DEFAULT: str
    PRIVATE_KEY: str

    # croc deployment
    CROC_DEX_ADDRESS: str
    CROC_QUERY_ADDRESS: str
    CROC_IMPACT_ADDRESS: str
    CROC_ROUTER_ADDRESS: str
    CROC_ROUTER_BYPASS_ADDRESS: str
    CROC_POOL_INDEX: int = 420
    CROC_DFLT_COLD_SWAP: bool = False

    # planner defaults
    SWAP_SLIPPAGE: float = 0.01
    REBALANCE_SLIPPAGE: float = 0.02

    # generic
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"


@lru_cache()
def get_settings() -> Settings:
    return Settings(
        # Core chain
        RPC_URL_DEFAULT=os.getenv("RPC_URL_DEFAULT", ""),
        PRIVATE_KEY=os.getenv("PRIVATE_KEY", ""),

        # Contracts
        CROC_DEX_ADDRESS=os.getenv("CROC_DEX_ADDRESS", ""),
        CROC_QUERY_ADDRESS=os.getenv("CROC_QUERY_ADDRESS", ""),
        CROC_IMPACT_ADDRESS=os.getenv("CROC_IMPACT_ADDRESS", ""),
        CROC_ROUTER_ADDRESS=os.getenv("CROC_ROUTER_ADDRESS", ""),
        CROC_ROUTER_BYPASS_ADDRESS=os.getenv("CROC_ROUTER_BYPASS_ADDRESS", ""),
        CROC_POOL_INDEX=int(os.getenv("CROC_POOL_INDEX", "420")),
        CROC_DFLT_COLD_SWAP=_parse_bool(os.getenv("CROC_DFLT_COLD_SWAP")),

        SWAP_SLIPPAGE=_parse_float(os.getenv("SWAP_SLIPPAGE"), 0.01),
        REBALANCE_SLIPPAGE=_parse_float(os.getenv("REBALANCE_SLIPPAGE"), 0.02),

        ENV=os.getenv("ENV", "dev"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
    )
