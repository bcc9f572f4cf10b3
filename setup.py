from setuptools import setup, find_packages
from pathlib import Path

here = Path(__file__).resolve().parent
long_description = (here / "README.md").read_text(encoding="utf-8")
requirements = (here / "requirements.txt").read_text(encoding="utf-8").splitlines()
requirements_test = (here / "requirements-test.txt").read_text(encoding="utf-8").splitlines()

setup(
    name="reasontide",
    version="0.1.0",
    description="MCP server that delegates open-ended reasoning tasks to a large reasoning model able to read, search and (with confirmation) change the workspace, with persistent conversation memory and git diff analysis.",
    packages=find_packages(exclude=["tests", "tests.*"]),
    long_description=long_description,
    long_description_content_type="text/markdown",
    install_requires=requirements,
    include_package_data=True,
    python_requires=">=3.10",
    extras_require={
        "test": requirements_test
    },
    entry_points={
        "console_scripts": [
            "reasontide-mcp-server=reasontide.mcp.server:serve"
        ]
    },
    classifiers=[
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Operating System :: OS Independent",
    ],
)
