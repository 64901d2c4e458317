from setuptools import setup

setup(name='minimal-nlp',
      version='0.1',
      description='A minimal problem definition for interior-point '
                  'nonlinear programming solvers.',
      packages=['minnlp'],
      python_requires='>=3.8',
      install_requires=['numpy', 'scipy>=1.9'],
      extras_require={'ipopt': ['cyipopt>=1.4'],
                      'test': ['pytest']},
      entry_points={'console_scripts': ['minimal-nlp=minnlp.__main__:main']})
