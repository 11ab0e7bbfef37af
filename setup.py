from setuptools import setup, find_packages

with open("requirements.txt") as f:
    required = f.read().splitlines()

setup(
    name="materialize",
    version="0.0.1",
    packages=find_packages("src"),
    package_dir={"": "src"},
    package_data={"materialize.formats": ["versions.yaml"]},
    python_requires=">=3.10",
    install_requires=required,
    extras_require={"test": ["pytest"]},
    entry_points={"console_scripts": ["materialize = materialize.cli:main"]},
    description="Attachment ingestion: reference discovery, cached download, format metadata and gallery images",
)
