from setuptools import setup, find_packages
import re

# Read version from milpay/__init__.py
with open('milpay/__init__.py') as f:
    version = re.search(r'^__version__ = ["\']([^"\']+)["\']', f.read(), re.MULTILINE).group(1)

setup(
    name='milpay',
    version=version,
    packages=find_packages(include=['milpay', 'milpay.*']),
    install_requires=[
        'PyYAML>=6.0',
        'click>=8.0',
        'pydantic>=2.0.0',
        'rich>=13.0',
    ],
    extras_require={
        'mcp': [
            'mcp[cli]>=1.0.0,<2',
        ],
        'test': [
            'pytest>=7.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'mil-pay=milpay.cli.__main__:main',
            'mil-pay-mcp=milpay.mcp.server:run_server',
        ],
    },
    author='Personal',
    description='Military pay calculators and LES analysis tools.',
    python_requires='>=3.10',
)
