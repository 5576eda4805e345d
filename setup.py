from setuptools import setup, find_packages

setup(
    name             = 'phonecheck',
    version          = '1.0.0',
    description      = 'PhoneCheck — multi-source risk verdicts for French phone numbers',
    author           = 'Nous Loop Solutions',
    packages         = find_packages(exclude=['tests*']),
    package_data     = {'phonecheck.data': ['*.json']},
    install_requires = open('requirements.txt').read().splitlines(),
    extras_require   = {
        'test': ['pytest>=7.0'],
    },
    entry_points     = {
        'console_scripts': [
            'phonecheck = phonecheck.cli:main',
        ],
    },
    python_requires  = '>=3.10',
    classifiers      = [
        'Programming Language :: Python :: 3',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
    ],
)
