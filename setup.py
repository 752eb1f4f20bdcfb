"""setup.py for xzadvisor.

Pure-Python package; the codec itself is liblzma, reached through the
standard library ``lzma`` bindings.
"""

from setuptools import find_packages, setup

setup(
    name="xzadvisor",
    version="0.1.0",
    description="Compression advisor for xz/LZMA2: prediction, preset search, recovery and grading",
    python_requires=">=3.9",
    packages=find_packages(include=["xzadvisor", "xzadvisor.*"]),
    install_requires=[
        "numpy>=1.21",
        "rich>=12.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "xzadvisor=xzadvisor.__main__:main",
        ],
    },
)
