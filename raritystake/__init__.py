"""
RarityStaking Package

Core imports are lazily loaded. For direct access, import from submodules:

    from raritystake.staking import RarityStaking
    from raritystake.chain import LocalChain
    from raritystake.exceptions import NotStakedError
"""

# Lazy imports keep `import raritystake` from configuring logging eagerly
def __getattr__(name):
    if name == 'RarityStaking':
        from .staking.contract import RarityStaking
        return RarityStaking
    elif name == 'LocalChain':
        from .chain.local import LocalChain
        return LocalChain
    elif name == 'load_config':
        from .config.loader import load_config
        return load_config
    raise AttributeError(f"module 'raritystake' has no attribute {name!r}")

__all__ = ['RarityStaking', 'LocalChain', 'load_config']
__version__ = '0.1.0'
