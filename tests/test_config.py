import os

import numpy as np
import pytest

import empft as em
from empft._empft.const import EPS0, OMEGA_UNIT
from empft._empft.logsettings import LOG_CONTROLLER, FORMAT_DICT

pytestmark = pytest.mark.unit


def test_default_settings():
    settings = em.Settings()
    assert settings.eppft_order == 9
    assert settings.singular_order == 16
    assert settings.force_cubature is False
    assert settings.threads == (os.cpu_count() or 1)

def test_force_cubature_from_environment(monkeypatch):
    monkeypatch.setenv('EMPFT_FORCE_CUBATURE', '1')
    assert em.Settings.from_env().force_cubature is True
    monkeypatch.setenv('EMPFT_FORCE_CUBATURE', 'no')
    assert em.Settings.from_env().force_cubature is False
    monkeypatch.delenv('EMPFT_FORCE_CUBATURE')
    assert em.Settings.from_env().force_cubature is False

def test_settings_copy_is_independent():
    base = em.Settings()
    changed = base.copy(eppft_order=5, num_threads=2)
    assert changed.eppft_order == 5
    assert changed.threads == 2
    assert base.eppft_order == 9

def test_material_eps_mu():
    eps, mu = em.VACUUM.eps_mu(1.0)
    assert eps == 1.0 and mu == 1.0

    lossy = em.Material(er=2.0, tand=0.01, cond=100.0)
    eps, mu = lossy.eps_mu(2.0)
    assert eps.real == pytest.approx(2.0)
    assert eps.imag == pytest.approx(0.02 + 100.0/(2.0*OMEGA_UNIT*EPS0))
    assert mu == 1.0

def test_frequency_dependent_material():
    drude = em.Material(er=em.FreqDependent(lambda w: 1.0 - 4.0/(w*(w + 0.1j))))
    assert drude.frequency_dependent
    eps, _ = drude.eps_mu(2.0)
    assert eps == pytest.approx(1.0 - 4.0/(2.0*(2.0 + 0.1j)))
    assert drude.refractive_index(2.0) == pytest.approx(np.sqrt(eps))

def test_log_controller_level(tmp_path):
    level = LOG_CONTROLLER.level
    LOG_CONTROLLER.set_std_loglevel('debug')
    assert os.environ['EMPFT_STD_LOGLEVEL'] == 'DEBUG'
    assert LOG_CONTROLLER.level == 'DEBUG'
    assert set(FORMAT_DICT) == {'TRACE', 'DEBUG', 'INFO', 'WARNING', 'ERROR'}

    LOG_CONTROLLER.set_write_file(tmp_path)
    em.get_opft(em.RWGGeometry([], []), 0, 1.0)
    LOG_CONTROLLER.remove_write_files()
    assert 'unknown surface' in (tmp_path/'logging.log').read_text()
    LOG_CONTROLLER.set_std_loglevel(level)
