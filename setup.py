from setuptools import setup

setup(
    name="dfa-builder",
    version="0.1.0",
    packages=["dfa_builder"],
    py_modules=["main"],
    python_requires=">=3.8",
    extras_require={"test": ["pytest"]},
)
