import pytest

from motor_projecao.overrides import OverrideTracker


def test_set_override_guarda_valor_sem_arredondar():
    tracker = OverrideTracker()
    assert tracker.set_override("budget", "medio", 4, 123.456) is True
    assert tracker.is_overridden("budget", "medio", 4)
    assert tracker.get("budget", "medio", 4) == 123.456
    assert not tracker.is_overridden("budget", "previsto", 4)


def test_set_override_mesmo_valor_nao_muda_estado():
    tracker = OverrideTracker()
    tracker.set_override("mkt", "previsto", 0, 10)
    assert tracker.set_override("mkt", "previsto", 0, 10) is False
    assert tracker.set_override("mkt", "previsto", 0, 11) is True


def test_zero_tambem_fica_fixado():
    tracker = OverrideTracker()
    assert tracker.set_override("mkt", "previsto", 0, 0) is True
    assert tracker.is_overridden("mkt", "previsto", 0)


@pytest.mark.parametrize("cenario, mes", [
    ("forecast", 0),
    ("previsto", 12),
    ("previsto", -1),
])
def test_set_override_rejeita_celula_invalida(cenario, mes):
    with pytest.raises(ValueError):
        OverrideTracker().set_override("mkt", cenario, mes, 1)


def test_clear_all_solta_tudo():
    tracker = OverrideTracker()
    tracker.set_override("mkt", "previsto", 0, 1)
    tracker.set_override("budget", "maximo", 11, 2)
    tracker.clear_all()
    assert len(tracker) == 0
    assert not tracker.is_overridden("mkt", "previsto", 0)


def test_to_dict_arrays_por_cenario():
    tracker = OverrideTracker()
    tracker.set_override("variable-expenses", "previsto", 0, 5000)
    dados = tracker.to_dict()
    assert list(dados) == ["variable-expenses"]
    assert dados["variable-expenses"]["previsto"][0] == 5000
    assert dados["variable-expenses"]["previsto"][1] is None
    assert dados["variable-expenses"]["medio"] == [None] * 12


def test_from_dict_reconstroi_e_ignora_malformados():
    data = {
        "budget": {"previsto": [None, 7] + [None] * 10, "medio": "lixo"},
        "mkt": "lixo",
    }
    tracker = OverrideTracker.from_dict(data)
    assert list(tracker) == [(("budget", "previsto", 1), 7.0)]
    assert tracker.categorias() == ["budget"]


def test_from_dict_volta_identico():
    tracker = OverrideTracker()
    tracker.set_override("resultado", "maximo", 3, -250.5)
    assert list(OverrideTracker.from_dict(tracker.to_dict())) == list(tracker)
