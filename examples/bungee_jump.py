# examples/bungee_jump.py
import numpy as np

from particle_sim import add_anchored_bungee, add_gravity
from particle_sim.core.invariants import kinetic_energy, spring_potential_energy
from particle_sim.scene import Scene

scene = Scene(dt=1/240, integrator="rk4")

jumper = scene.create_particle(position=(0.0, 50.0, 0.0), mass=80.0, damping=0.995)
add_gravity(jumper)
# 20 m cord tied to the bridge above the jumper
add_anchored_bungee(jumper, (0.0, 50.0, 0.0), spring_constant=400.0, rest_length=20.0, damping_coeff=40.0)

lowest = jumper.position[1]
for _ in range(240 * 10):
    scene.step()
    lowest = min(lowest, float(jumper.position[1]))

print("lowest point:", lowest)
print("resting at:", jumper.position, "speed:", float(np.linalg.norm(jumper.velocity)))
print("energy: KE", kinetic_energy(scene.particles), "PE(cord)", spring_potential_energy(scene.particles))
