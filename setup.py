from setuptools import setup, find_packages

setup(
    name='task-tracker',
    version='1.0.0',
    description='Task tracking service with filtering, sorting and pagination',
    long_description='A FastAPI service managing task records with lifecycle tracking (creation, update, completion, soft deletion) and dynamic filtering, sorting and pagination over the collection.',
    packages=find_packages(exclude=['tests', 'tests.*']),
    python_requires='>=3.9',
    install_requires=[
        'fastapi',
        'uvicorn',
        'sqlalchemy>=2.0',
        'pydantic>=2.0',
        'pydantic-settings',
        'psycopg2-binary',
    ],
    extras_require={
        'test': [
            'pytest',
            'httpx',
        ],
    },
    classifiers=['License :: OSI Approved :: MIT License',],
    license="MIT",
)
