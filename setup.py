from setuptools import setup, find_packages


if __name__ == "__main__":
    setup(
        name="dsge-regimes",
        version="0.1.0",
        description="Regime-indexed parameter sets for DSGE models",
        platforms="linux",
        python_requires=">=3.9",
        packages=find_packages(include=["dsge_regimes", "dsge_regimes.*"]),
        install_requires=[
            "numpy",
            "pandas",
            "scipy",
            "sympy",
            "pyyaml",
            "cerberus",
        ],
        extras_require={
            "test": ["pytest"],
        },
        scripts=["display_regimes.py"],
        include_package_data=True,
        package_data={
            "dsge_regimes": [
                "examples/m1010/*",
                "schema/*",
            ]
        },
    )
