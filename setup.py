from setuptools import setup, find_packages

setup(
    name="dexpools-deploy",
    version="0.1.0",
    description="Deployment scripts for the DexPools Ethereum/Metis contracts",
    packages=find_packages(include=["dexpools_deploy", "dexpools_deploy.*"]),
    package_data={
        "dexpools_deploy": ["configs/*.json", "configs/schemas/*.json"],
    },
    install_requires=[
        "web3>=6.0.0",
        "eth-account>=0.8.0",
        "jsonschema>=4.0.0",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
        ],
    },
    python_requires=">=3.8",
    entry_points={
        "console_scripts": [
            "dexpools-deploy=dexpools_deploy.main:main",
        ],
    },
)
