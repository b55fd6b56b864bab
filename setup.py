"""
Lawnotation: annotation backend for legal documents

Task sequencing, reassignment and replication services behind the
Lawnotation annotation frontend.
"""
from setuptools import setup, find_packages
from pathlib import Path

# Read long description from README
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""

# Read requirements
requirements_file = Path(__file__).parent / "requirements.txt"
requirements = []
if requirements_file.exists():
    with open(requirements_file) as f:
        requirements = [line.strip() for line in f if line.strip() and not line.startswith('#')]

setup(
    name="lawnotation",
    version="0.1.0",
    description="Annotation backend for legal documents: assignment queues, reassignment and task replication",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="Lawnotation",
    author_email="info@lawnotation.org",
    url="https://github.com/lawnotation/lawnotation",
    packages=find_packages(where="backend"),
    package_dir={"": "backend"},
    package_data={"core": ["fixtures/*.json"]},
    include_package_data=True,
    install_requires=requirements,
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-django>=4.5",
            "black>=23.0",
            "flake8>=6.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "lawnotation=lawnotation.cli:main",
        ],
    },
    python_requires=">=3.9",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Legal Industry",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Framework :: Django",
        "Framework :: Celery",
    ],
    keywords="annotation legal-documents nlp django celery research",
    project_urls={
        "Bug Reports": "https://github.com/lawnotation/lawnotation/issues",
        "Source": "https://github.com/lawnotation/lawnotation",
    },
)
