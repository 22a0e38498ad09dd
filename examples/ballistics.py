# examples/ballistics.py
from particle_sim import Particle, add_drag, add_gravity, integrate

# Pistol, artillery shell and fireball: (velocity, mass, damping)
shots = {
    "pistol": ((0.0, 0.0, 35.0), 2.0, 0.99),
    "artillery": ((0.0, 30.0, 40.0), 200.0, 0.99),
    "fireball": ((0.0, 0.0, 10.0), 1.0, 0.9),
}

for name, (velocity, mass, damping) in shots.items():
    shot = Particle(position=(0.0, 1.5, 0.0), velocity=velocity, mass=mass, damping=damping)
    add_gravity(shot)
    add_drag(shot, linear=0.01, quadratic=0.001)

    frames = 0
    while shot.position[1] > 0.0 and frames < 600:
        integrate(shot, 1/60, "euler", substeps=10)
        frames += 1

    print(f"{name:10s} t={shot.time:6.3f}s  pos={shot.position}  vel={shot.velocity}")
