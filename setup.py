from setuptools import setup, find_packages

setup(name='futurity',
      version='0.0.1',
      description='Futures with synchronous continuations, and coroutines which suspend on them',
      classifiers=[
          "Programming Language :: Python :: 3",
          "License :: OSI Approved :: MIT License",
          "Framework :: Trio",
      ],
      keywords='future promise continuation coroutine trio',
      license='MIT',
      python_requires='>=3.11',
      packages=find_packages(include=['futurity', 'futurity.*']),
      install_requires=[
          'trio',
          'outcome',
      ],
)
