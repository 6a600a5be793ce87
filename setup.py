""" eosk1 build script for setuptools.

"""

from setuptools import find_packages, setup  # type: ignore

import eosk1

with open("README.md", "r", encoding="ascii") as file_:
    longdescription = file_.read()

setup(
    name=eosk1.name,
    version=eosk1.__version__,
    license=eosk1.__license__,
    author=eosk1.__author__,
    author_email=eosk1.__author_email__,
    description="A library for EOS K1 (secp256k1) keys and signatures",
    long_description=longdescription,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"eosk1": ["ecc/_data/*.json"]},
    install_requires=["dataclasses_json", "pycryptodome"],
    extras_require={"test": ["pytest", "coincurve"]},
    keywords=(
        "eos cryptography elliptic-curves secp256k1 ecdsa RFC-6979 "
        "base58 public-key-recovery canonical-signature"
    ),
    python_requires=">=3.7",
    classifiers=[
        "Programming Language :: Python :: 3.7",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Natural Language :: English",
        "Operating System :: OS Independent",
        "Topic :: Security :: Cryptography",
        "Topic :: Scientific/Engineering",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
)
