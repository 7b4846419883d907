"""
Установочный скрипт для массового переноса репозиториев.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Чтение README
this_directory = Path(__file__).parent
readme_file = this_directory / "README.md"
long_description = readme_file.read_text(encoding='utf-8') if readme_file.exists() else ""

# Чтение requirements
requirements = []
requirements_file = this_directory / "requirements.txt"
if requirements_file.exists():
    with open(requirements_file, 'r', encoding='utf-8') as f:
        requirements = [line.strip() for line in f if line.strip() and not line.startswith('#')]

setup(
    name="concurrent-repo-transfer",
    version="1.0.0",
    author="Repo Transfer Team",
    author_email="team@repotransfer.example.com",
    description="Конкурентный массовый перенос репозиториев GitHub между аккаунтами с ретраями и итоговой сводкой",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/example/concurrent-repo-transfer",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "Intended Audience :: Developers",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Software Development :: Version Control :: Git",
        "Topic :: System :: Systems Administration",
    ],
    python_requires=">=3.8",
    install_requires=requirements or [
        "pyyaml>=6.0",
        "requests>=2.28.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "pytest-mock>=3.10.0",
            "black>=22.0.0",
            "flake8>=5.0.0",
            "mypy>=1.0.0",
            "isort>=5.12.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "repo-transfer=repo_transfer.cli:main",
        ],
    },
    keywords="github repository transfer concurrent worker pool retry backoff",
    project_urls={
        "Bug Reports": "https://github.com/example/concurrent-repo-transfer/issues",
        "Source": "https://github.com/example/concurrent-repo-transfer",
    },
)
