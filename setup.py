"""setuptools setup for FocusLedger.

Install for development:
    pip install -e ".[test]"
"""

from setuptools import setup, find_packages

setup(
    name="focusledger",
    version="0.1.0",
    description="Pomodoro timer and work-session accounting engine",
    packages=find_packages(include=["focusledger", "focusledger.*"]),
    python_requires=">=3.10",
    install_requires=[
        "PyQt6>=6.5",
        "SQLAlchemy>=2.0",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        "console_scripts": ["focusledger=focusledger.__main__:main"],
    },
)
