import os

from setuptools import setup, find_packages

__version__ = "0.1"

tests_require = ['pytest', 'pytest-asyncio', 'mypy', 'pycodestyle', 'types-setuptools']

extras_require = {
    'cli': ['click'],
    'test': tests_require + ['click'],
    'doc': ['sphinx', 'sphinx_rtd_theme'],
}


def read(fname):
    return open(os.path.join(os.path.dirname(__file__), fname)).read()


setup(
    name='python-s7ua',
    version=__version__,
    description='OPC UA client for the structure and variables of Siemens S7 PLCs',
    packages=find_packages(exclude=['tests', 'tests.*']),
    package_data={'s7ua': ['py.typed']},
    license='MIT',
    long_description=read('README.rst'),
    install_requires=['asyncua>=2.0'],
    entry_points={
        'console_scripts': [
            's7ua-browse = s7ua.__main__:main',
        ]
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Environment :: Console",
        "Topic :: System :: Hardware",
        "Intended Audience :: Developers",
        "Intended Audience :: Manufacturing",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires='>=3.9',
    extras_require=extras_require,
    tests_require=tests_require,
    test_suite="tests",
)
