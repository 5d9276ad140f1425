from adapters.chain.croc_context import dex_context_from_settings
from core.services.dex_context import DexContext


def get_dex_context() -> DexContext:
    return dex_context_from_settings()
