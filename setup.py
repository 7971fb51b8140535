from setuptools import setup, find_packages

setup(
    name="scribeflow",
    version="0.1.0",
    description="Streaming speech transcription and translation with Whisper and NLLB",
    author="",
    python_requires=">=3.9",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pyaudio>=0.2.11",
        "numpy>=1.21.0",
        "scipy>=1.7.0",
        "torch>=2.0.0",
        "transformers>=4.40.0",
        "huggingface-hub>=0.20.0",
        "tqdm>=4.62.0",
        "rich>=12.5.0",
        "pydantic>=2.0.0",
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
            "scribeflow=scribeflow.main:main",
        ],
    },
)
