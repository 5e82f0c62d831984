import os
import re

from setuptools import find_packages, setup


def get_version():
    with open(os.path.join(os.path.dirname(__file__), 'src', 'methdiff', '__init__.py')) as fh:
        match = re.search(r"^__version__ = '([^']+)'", fh.read(), re.MULTILINE)
    return match.group(1)


def parse_md_readme():
    try:
        with open('README.md') as fh:
            return fh.read()
    except OSError:
        return ''


TEST_REQS = [
    'coverage>=4.2',
    'pycodestyle>=2.3.1',
    'pytest',
    'pytest-cov',
]


INSTALL_REQS = [
    'braceexpand==0.1.7',
    'numpy>=1.13.1',
    'pandas>=1.1',
    'scipy>=1.5',
]

DEPLOY_REQS = ['twine', 'wheel']


setup(
    name='methdiff',
    version=get_version(),
    packages=find_packages(where='src', exclude=['tests']),
    package_dir={'': 'src'},
    description='Probability of differential CpG methylation between two sorted samples',
    long_description=parse_md_readme(),
    long_description_content_type='text/markdown',
    install_requires=INSTALL_REQS,
    extras_require={
        'test': TEST_REQS,
        'dev': ['black', 'flake8'] + TEST_REQS + DEPLOY_REQS,
        'deploy': DEPLOY_REQS,
    },
    python_requires='>=3.7',
    entry_points={'console_scripts': ['methdiff = methdiff.main:main']},
)
