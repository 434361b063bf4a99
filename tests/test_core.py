# tests/test_core.py
from diffusion_sim import EngineConfig, SimulationEngine


def test_small_run():
    engine = SimulationEngine(EngineConfig(num_atoms=50, seed=0))
    engine.running = True
    for _ in range(10):
        engine.step(0.05)
    assert engine.time > 0.0
    assert engine.get_histogram().sum() <= engine.num_atoms
