from setuptools import setup, find_packages

setup(
    name='urscenario',
    version='0.1.0',
    py_modules=['urscen', 'compiler'],
    packages=find_packages(exclude=['tests', 'tests.*']),
    install_requires=[
        'lark',
        'pydantic>=2.5',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'urscen = urscen:main',
        ],
    },
)
