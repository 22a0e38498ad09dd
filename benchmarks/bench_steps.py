"""
Microbenchmark: time per frame vs number of particles.
Run:
  python benchmarks/bench_steps.py
"""
import time
import numpy as np
from particle_sim import add_drag, add_gravity
from particle_sim.scene import Scene

def run(n: int, integrator: str, steps: int = 120):
    scene = Scene(dt=1/60, integrator=integrator, substeps=10)

    rng = np.random.default_rng(12345)  # determinism (no randomness elsewhere)

    # particles in pairs joined by springs, small random jitter
    prev = None
    for k in range(n):
        pos = (0.5 * k + 0.01 * float(rng.normal()), 2.0 + 0.01 * float(rng.normal()), 0.0)
        p = scene.create_particle(position=pos, velocity=(0.0, 0.0, 0.0), mass=1.0)
        add_gravity(p)
        add_drag(p, 0.05, 0.005)
        if prev is not None and k % 2 == 1:
            scene.add_spring(prev, p, spring_constant=30.0, rest_length=0.5, damping_coeff=0.1)
        prev = p

    # warmup
    for _ in range(10):
        scene.step()

    t0 = time.perf_counter()
    for _ in range(steps):
        scene.step()
    t1 = time.perf_counter()

    return (t1 - t0) / steps

if __name__ == "__main__":
    for integrator in ["euler", "rk4"]:
        for n in [10, 50, 100, 250]:
            per_step = run(n, integrator)
            print(f"{integrator:5s} N={n:4d}  step={1e3*per_step:8.3f} ms  steps/s={1/per_step:8.1f}")
        print()
