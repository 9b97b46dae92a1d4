from setuptools import setup, find_packages
from pathlib import Path

# Read the requirements from requirements.txt
reqs_path = Path(__file__).parent / "requirements.txt"
requirements = [
    line.strip()
    for line in reqs_path.read_text().splitlines()
    if line.strip() and not line.startswith("#")
]

setup(
    name="copyrights",
    version="0.1.0",
    description="Check and repair copyright headers in source files",
    packages=find_packages(include=["copyrights", "copyrights.*"]),
    package_data={"copyrights": ["resources/*.txt"]},
    python_requires=">=3.11",
    install_requires=requirements,
    extras_require={"test": ["pytest"]},
    entry_points={
        "console_scripts": [
            "copyrights=copyrights.cli:main",
        ],
    },
)
