import setuptools
import os

own_dir = os.path.abspath(os.path.dirname(__file__))


def requirements():
    with open(os.path.join(own_dir, 'requirements.txt')) as f:
        for line in f.readlines():
            line = line.strip()
            if not line or line.startswith('#'):
                continue
            yield line


def modules():
    return [
        'draft_release',
        'makoutil',
        'version',
    ]


def packages():
    return [
        'ci',
        'github',
        'release_notes',
    ]


def version():
    with open(os.path.join(own_dir, 'VERSION')) as f:
        return f.read().strip()


setuptools.setup(
    name='gardener-draft-release',
    version=version(),
    description='Gardener Draft-Release Reconciler (conventional-commits based versioning)',
    python_requires='>=3.11',
    py_modules=modules(),
    packages=packages(),
    package_data={
        'release_notes': ['*.mako'],
    },
    install_requires=list(requirements()),
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
    },
)
