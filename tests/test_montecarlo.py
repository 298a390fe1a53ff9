import logging
import os

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import pytest
from cruising_tools import ShoupModel
from cruising_tools.config.params import init_params
from cruising_tools.exceptions import ConfigurationError
from cruising_tools.montecarlo import Sim, MonteCarloConfig, mc_simulation
from cruising_tools.state import FIELDS
from cruising_tools.utils.results import SimulationResults


config_data = {
    "parameters": {
        "p": 1.0,
        "m": 13.25,
        "t": ["normal", [1.5, 0.5]],
        "ar": ["bernoulli", [0.3]],
        "cpk": 4,
        "model_time": 90,
    },
    "num_worker": 2,
    "num_samples": 3,
    "seed": 7,
}


def test_mc_simulation_shape():
    out = mc_simulation(init_params(model_time=30), n=4, seed=5)
    assert out.shape == (30, len(FIELDS), 4)


def test_mc_simulation_is_seeded():
    params = init_params(model_time=60)
    a = mc_simulation(params, n=3, seed=1)
    b = mc_simulation(params, n=3, seed=1)
    assert np.array_equal(a, b)


def test_serial_matches_parallel():
    params = init_params(model_time=120)
    serial = mc_simulation(params, n=5, seed=2)
    parallel = mc_simulation(params, n=5, seed=2, parallel=True, workers=3)
    assert np.array_equal(serial, parallel)


def test_config_round_trip(tmp_path):
    config = MonteCarloConfig.from_dict(config_data)
    outfile = tmp_path / "mc_config.json"
    config.to_json(outfile)

    loaded = MonteCarloConfig.from_json(outfile)
    assert loaded.to_dict() == config_data

    with pytest.raises(FileExistsError):
        config.to_json(outfile)


def test_config_defaults():
    config = MonteCarloConfig()
    params = config.get_params()
    assert params.model.model_time == 720
    assert config.num_samples == 100


def test_config_get_params():
    params = MonteCarloConfig.from_dict(config_data).get_params()
    assert params.characteristic.m == 13.25
    assert params.preference.t.mean() == pytest.approx(1.5)


def test_config_rejects_unknown_parameter():
    config = MonteCarloConfig.from_dict({"parameters": {"price": 2.0}})
    with pytest.raises(ConfigurationError):
        config.get_params()


def test_sim_rejects_invalid_config():
    config = MonteCarloConfig.from_dict({"parameters": {"cpk": -1}})
    with pytest.raises(ConfigurationError):
        Sim(ShoupModel(), config)


def test_sim_run_and_analyze(tmp_path):
    sim = Sim(ShoupModel(), MonteCarloConfig.from_dict(config_data))
    results = sim.run(parallel=False)

    assert len(results) == 3
    assert results.shape == (90, 8, 3)
    assert results.field("curb_current").shape == (90, 3)
    assert results.final("curb_total").shape == (3,)
    assert list(results.run(0).columns) == FIELDS

    stats = Sim.analyze(results)
    assert set(stats) == {"ci_low", "ci_high", "mean", "stddev", "stderr", "min_val", "max_val"}
    assert stats["mean"].shape == (90, 8)
    assert np.allclose(stats["mean"].to_numpy(), results.data.mean(axis=2))
    assert np.all(stats["ci_low"].to_numpy() <= stats["ci_high"].to_numpy())
    assert np.all(stats["min_val"].to_numpy() <= stats["mean"].to_numpy() + 1e-12)

    stats.save(tmp_path)
    for key in stats:
        assert os.path.exists(tmp_path / f"{key}.csv")


def test_sim_seed_override():
    config = MonteCarloConfig.from_dict(config_data)
    a = Sim(ShoupModel(), config, seed=11).run(n=2, parallel=False)
    b = Sim(ShoupModel(), config, seed=11).run(n=2, parallel=True, workers=2)
    assert np.array_equal(a.data, b.data)


def test_single_run_has_no_spread():
    sim = Sim(ShoupModel(), MonteCarloConfig.from_dict(config_data))
    stats = Sim.analyze(sim.run(n=1, parallel=False))
    assert stats["stddev"].isna().all().all()


def test_results_save_load(tmp_path):
    results = SimulationResults(mc_simulation(init_params(model_time=20), n=2, seed=0))
    outfile = tmp_path / "results.npy"
    results.save(outfile)
    assert np.array_equal(SimulationResults.load(outfile).data, results.data)


def test_plot_ci():
    sim = Sim(ShoupModel(), MonteCarloConfig.from_dict(config_data))
    stats = Sim.analyze(sim.run(n=2, parallel=False))
    fig, ax = Sim.plot_ci(stats, show=False)
    assert len(ax.lines) == 3
    assert ax.get_xlabel() == "Hours"
    plt.close(fig)


def test_sim_run_kwargs(caplog):
    sim = Sim(ShoupModel(), MonteCarloConfig.from_dict(config_data), run_kwargs={"verbose": True})
    with caplog.at_level(logging.INFO):
        sim.run(n=2, parallel=False)
    assert caplog.text.count("arrivals") == 2


def test_mc_simulation_horizon_override():
    params = init_params(model_time=30)
    serial = mc_simulation(params, n=2, seed=1, X={"model_time": 20})
    parallel = mc_simulation(params, n=2, seed=1, parallel=True, workers=2, X={"model_time": 20})
    assert serial.shape == (20, len(FIELDS), 2)
    assert np.array_equal(serial, parallel)


def test_sim_run_horizon_override():
    sim = Sim(ShoupModel(), MonteCarloConfig.from_dict(config_data))
    results = sim.run(n=2, parallel=False, X={"model_time": 45, "p": 2.0})
    assert results.shape == (45, 8, 2)


def test_mc_simulation_invalid_override():
    with pytest.raises(ConfigurationError):
        mc_simulation(init_params(model_time=30), n=2, seed=1, X={"model_time": 0})
