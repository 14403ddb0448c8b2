import os
from setuptools import setup, find_packages

def parse_requirements(requirements):
    path = os.path.join(os.path.dirname(os.path.abspath(__file__)), requirements)
    with open(path) as f:
        return [l.strip('\n') for l in f if l.strip('\n') and not l.startswith('#')]

requirements = parse_requirements("requirements.txt")

setup(
    name='labrecord-backend',
    version='0.1.0',
    install_requires=requirements,
    extras_require={
        "test": ["pytest"],
    },
    package_dir={"": "src"},
    packages=find_packages("src"),
    package_data={
        "labrecord_backend": ["alembic.ini", "alembic/*.py", "alembic/*.mako", "alembic/versions/*.py"],
    },
    entry_points={
        "console_scripts": [
            "labrecord=labrecord_backend.cli.cli:cli",
        ],
    }
)
