from setuptools import setup, find_namespace_packages

setup(
    name="convergentEncoder",
    version="0.1.0",
    packages=find_namespace_packages(include=["convergentEncode*"]),
    python_requires=">=3.10",
    install_requires=[
        "tqdm",
        "psutil",
        "numpy",
        "argparse_range",
        "matplotlib",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points="""
      [console_scripts]
      convergentEncoder=convergentEncode.cli.__main__:main
      """,
)
