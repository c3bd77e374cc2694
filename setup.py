from setuptools import setup, find_packages

setup(
    name="poise",
    version="0.1.0",
    description="Presentation practice session recorder for hand-movement and voice sensors",
    author="",
    python_requires=">=3.8",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pyaudio>=0.2.11",
        "numpy>=1.21.0",
        "rich>=12.5.0",
        "pyyaml>=6.0.0",
        "pypubsub>=4.0.3",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "poise=poise.main:main",
        ],
    },
)
