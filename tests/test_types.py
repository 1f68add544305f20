import json
import math

import pytest

from teleop_link.controllers.types import ControlVector, SamplerHandle


def test_neutral_is_all_zero():
    assert ControlVector.NEUTRAL == ControlVector(0.0, 0.0, 0.0, 0.0)
    assert ControlVector.NEUTRAL.to_payload() == {"lx": 0.0, "ly": 0.0, "rx": 0.0, "ry": 0.0}


def test_json_shape_is_flat_object_of_four_numbers():
    obj = json.loads(ControlVector(lx=0.5, ly=-1, rx=0.25, ry=0).to_json())
    assert obj == {"lx": 0.5, "ly": -1.0, "rx": 0.25, "ry": 0.0}
    assert all(isinstance(v, float) for v in obj.values())


@pytest.mark.parametrize("bad", [1.01, -1.5, math.nan, math.inf, True, "0.5", None])
def test_rejects_out_of_contract_values(bad):
    with pytest.raises(ValueError):
        ControlVector(lx=bad)


def test_from_json_requires_all_axes():
    with pytest.raises(ValueError):
        ControlVector.from_json('{"lx": 0.1, "ly": 0.2, "rx": 0.3}')


def test_from_json_rejects_garbage():
    with pytest.raises(ValueError):
        ControlVector.from_json("not json")
    with pytest.raises(ValueError):
        ControlVector.from_json("[1, 2, 3, 4]")


def test_from_json_ignores_extra_keys():
    v = ControlVector.from_json('{"lx": 0.1, "ly": 0.2, "rx": 0.3, "ry": 0.4, "seq": 7}')
    assert v == ControlVector(0.1, 0.2, 0.3, 0.4)


def test_sampler_handle_detach_is_idempotent(scheduler):
    released = []
    timer = scheduler.call_every(0.05, lambda: None)
    handle = SamplerHandle(timer, on_detach=lambda: released.append(1))

    assert handle.active
    handle.detach()
    handle.detach()

    assert not handle.active
    assert not timer.active
    assert released == [1]
