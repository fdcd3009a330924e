from setuptools import setup

from app.pychip8.__version__ import __version_string__

setup(
    name="PyChip8",
    version=__version_string__,
    description="CHIP-8 virtual machine interpreter",
    packages=["pychip8", "pychip8.util"],
    package_dir={"pychip8": "app/pychip8"},
    python_requires=">=3.11",
    install_requires=[
        "numpy",
        "bitarray",
        "returns",
        "rich",
        "typing_extensions",
    ],
    extras_require={
        "gui": ["pygame"],
        "test": ["pytest"],
    },
    entry_points={"console_scripts": ["pychip8 = pychip8.__main__:main"]},
    include_package_data=True,
    zip_safe=False,
)
