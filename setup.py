from setuptools import setup


setup(
    name="sheet-insights",
    version="0.1.0",
    description="Upload a spreadsheet or CSV and get a searchable table, column profile, trends and chart data",
    packages=["sheet_insights"],
    python_requires=">=3.9",
    install_requires=[
        "pandas",
        "chardet",
        "openpyxl",
        "streamlit",
        "requests",
        "fastapi",
        "uvicorn",
        "python-multipart",
    ],
    extras_require={
        "excel-legacy": ["xlrd"],
        "ods": ["odfpy"],
        "all": ["xlrd", "odfpy"],
        "test": ["pytest", "httpx"],
    },
    entry_points={
        "console_scripts": [
            "sheet-insights=sheet_insights.cli:main",
        ]
    },
)
