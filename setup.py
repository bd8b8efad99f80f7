# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="burn_boost",
    version="0.1.0",
    packages=find_namespace_packages(include=["burn_boost", "burn_boost.*"]),
    python_requires=">=3.10",
    install_requires=[
        "plyvel",              # LevelDB record store
        "msgpack",             # record encoding
        "cryptography",        # ECDSA instruction signatures
        "pycryptodome",        # keccak instruction ids
        "prometheus_client",   # metrics
        "psutil",              # monitoring
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "burn-boost=burn_boost.cli:main",
        ],
    },
)
