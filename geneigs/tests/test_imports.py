'''
General tests for import behavior of the geneigs package.

Ensures that submodules are lazily imported and key exports are available.

Tests:
- Lazy loading of subpackages
- Key class/function exports
- Package metadata presence
'''

import types

import pytest

# -------------------------------------------------------------------

def test_root_imports_lazy():
    import geneigs
    algebra = geneigs.algebra
    assert isinstance(algebra, types.ModuleType)
    assert isinstance(geneigs.common, types.ModuleType)

# -------------------------------------------------------------------

def test_root_shortcuts():
    import geneigs
    from geneigs.algebra.eigen.factory import eigs
    from geneigs.algebra.eigen.gen_eigs import GenEigsSolver
    assert geneigs.eigs is eigs
    assert geneigs.GenEigsSolver is GenEigsSolver

def test_eigen_exports():
    from geneigs.algebra import eigen
    for name in eigen.__all__:
        assert getattr(eigen, name) is not None, name

def test_algebra_exports():
    from geneigs import algebra
    assert callable(algebra.get_rng)
    assert callable(algebra.get_logger)
    assert isinstance(algebra.utils, types.ModuleType)

def test_common_exports():
    from geneigs import common
    assert common.get_global_logger() is common.get_global_logger()

def test_unknown_attribute():
    import geneigs
    from geneigs.algebra import eigen
    with pytest.raises(AttributeError):
        geneigs.not_there
    with pytest.raises(AttributeError):
        eigen.not_there

# -------------------------------------------------------------------

def test_package_metadata():
    import geneigs
    assert hasattr(geneigs, "__version__")
    assert geneigs.get_module_description("algebra") != "Module not found."

# -------------------------------------------------------------------
#! End of file
# -------------------------------------------------------------------
