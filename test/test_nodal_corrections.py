import pytest

from tidepredict.nodal_corrections import nodal_factor, supported


def test_unknown_constituent_has_no_correction() -> None:
    assert nodal_factor("X9", 123.0) == (1.0, 0.0)
    assert nodal_factor("S2", 123.0) == (1.0, 0.0)
    assert nodal_factor("P1", 10.0) == (1.0, 0.0)


def test_m2() -> None:
    f, u = nodal_factor("M2", 0.0)
    assert f == pytest.approx(1.0004 - 0.0373 + 0.0002)
    assert u == pytest.approx(0.0, abs=1e-12)

    f, u = nodal_factor("M2", 90.0)
    assert f == pytest.approx(1.0004 - 0.0002)
    assert u == pytest.approx(-2.14)


def test_o1_k1_k2_at_zero_node() -> None:
    expected = {
        "O1": 1.0089 + 0.1871 - 0.0147 + 0.0006,
        "K1": 1.0060 + 0.1150 - 0.0088 + 0.0016,
        "K2": 1.0241 + 0.2863 + 0.0083 - 0.0015,
    }
    for cid, f in expected.items():
        assert nodal_factor(cid, 0.0)[0] == pytest.approx(f)


def test_k1_quarter_node() -> None:
    f, u = nodal_factor("K1", 90.0)
    assert f == pytest.approx(1.0060 + 0.0088)
    assert u == pytest.approx(-12.94 + 0.19)


def test_case_insensitive() -> None:
    assert nodal_factor("m2", 40.0) == nodal_factor("M2", 40.0)
    assert nodal_factor("k1", 40.0) == nodal_factor("K1", 40.0)


def test_families_and_overtides() -> None:
    N = 250.0
    f_m2, u_m2 = nodal_factor("M2", N)
    assert nodal_factor("N2", N) == (f_m2, u_m2)
    assert nodal_factor("Q1", N) == nodal_factor("O1", N)
    f, u = nodal_factor("M4", N)
    assert f == pytest.approx(f_m2 ** 2)
    assert u == pytest.approx(2 * u_m2)
    f, u = nodal_factor("M6", N)
    assert f == pytest.approx(f_m2 ** 3)
    assert u == pytest.approx(3 * u_m2)


def test_factors_stay_near_unity() -> None:
    for cid in supported():
        for N in range(0, 360, 15):
            f, u = nodal_factor(cid, float(N))
            assert 0.5 < f < 1.5
            assert -40.0 < u < 40.0
