from setuptools import setup, find_packages

setup(
    name="gametime-travel",
    version="0.1.0",
    description="Traffic-aware departure, wake-up and hotel planning for scheduled hockey games.",
    packages=find_packages(exclude=["tests"]),
    install_requires=[
        "requests",
        "pytz",
        "python-dotenv",
    ],
    extras_require={
        "test": ["pytest"],
    },
    py_modules=["main_cli"],
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires='>=3.8',
)
