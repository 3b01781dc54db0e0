import os
from pathlib import Path

from setuptools import find_packages, setup

blame_pr_root = Path(__file__).parent


def version() -> str:
    with open(os.path.join(blame_pr_root / "blamepr", "VERSION")) as version_file:
        return version_file.read().strip()


setup(
    name="blame-pr",
    version=version(),
    packages=find_packages(exclude=["tests"]),
    package_data={"blamepr": ["VERSION"]},
    include_package_data=True,
    install_requires=[
        "click>=8.0.1,<9",
        "rich>=10.3.0",
        "jsons>=1.4.2,<2",
        "pygit2>=1.6.0,<2",
    ],
    extras_require={
        "test": ["pytest>=6"],
    },
    entry_points="""
        [console_scripts]
        bpr=blamepr.cli:bpr
    """,
)
