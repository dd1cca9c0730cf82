from setuptools import setup, find_packages

setup(
    name="cluster_bc",
    version="1.0.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "numpy",
        "scipy",
        "pandas",
        "numba",
        "click",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "cluster-bc=cluster_bc.cli:main",
        ],
    },
    description="Border-distance profiles and parallel multilevel Louvain clustering "
                "for cluster-decomposed betweenness centrality",
    python_requires=">=3.8",
)
