"""Nox configuration."""

import nox                                       # pylint: disable=import-error


@nox.session(python=['3.9', '3.10', '3.11', '3.12'], reuse_venv=True)
def test(session):
    """Run the test suite."""
    session.install('-e', '.[test]')
    args = ['pytest', *session.posargs, '-n', 'auto', '-vv', '-x', 'tests']
    session.run(*args)


@nox.session(reuse_venv=True)
def release(session):
    """Build the distribution files."""
    session.install('build')
    session.run('python', '-m', 'build')
