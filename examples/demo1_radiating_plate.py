import empft as em
import numpy as np

""" RADIATING PLATE

This demo puts a single RWG current on a square plate made of two triangles and
computes the power it radiates with the equivalence principle (EPPFT) method.
A current that radiates into vacuum absorbs a negative amount of power, so the
absorbed power should equal minus the radiated power computed from the far field.

Lengths are in micrometers and angular frequencies in units of 3e14 rad/s.
"""

# --- Mesh ------------------------------------------------------------------
vertices = np.array([[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0]], dtype=float)
panels = np.array([[0, 1, 2], [0, 2, 3]])

plate = em.RWGSurface(vertices, panels, name='plate')
geometry = em.RWGGeometry([plate], [em.VACUUM, em.VACUUM])

# --- Surface current ---------------------------------------------------------
omega = 1.0
kn = np.array([1.0, 0.0], dtype=complex)   # electric current only

# --- Power, force and torque -----------------------------------------------
settings = em.Settings(show_progress=True)
by_edge = np.zeros((7, plate.num_edges))
eppft = em.get_eppft(geometry, 0, omega, kn=kn, by_edge=by_edge, settings=settings)
opft = em.get_opft(geometry, 0, omega, kn=kn)

# --- Far field reference -------------------------------------------------------
k = omega
DPTs = em.gaus_quad_tri(12)
ct, wt = np.polynomial.legendre.leggauss(40)
phi = np.linspace(0, 2*np.pi, 80, endpoint=False)
CT, PHI = np.meshgrid(ct, phi, indexing='ij')
ST = np.sqrt(1 - CT**2)
rhat = np.stack([ST*np.cos(PHI), ST*np.sin(PHI), CT]).reshape(3, -1)
dOmega = np.repeat(wt, phi.shape[0])*2*np.pi/phi.shape[0]

edge = plate.edges[0]
F = np.zeros(rhat.shape, dtype=complex)
for ip, iq, sgn in ((edge.ipanel_p, edge.iqp, 1), (edge.ipanel_m, edge.iqm, -1)):
    panel = plate.panels[ip]
    X = plate.panel_vertices(ip) @ DPTs[1:]
    f = sgn*edge.length/(2*panel.area)*(X - vertices[iq][:, None])
    F += panel.area*(f*DPTs[0]) @ np.exp(-1j*k*(rhat.T @ X)).T
Fperp = F - rhat*np.sum(rhat*F, axis=0)
p_rad = em.ZVAC*k**2/(32*np.pi**2)*np.sum(dOmega*np.sum(np.abs(Fperp)**2, axis=0))

print(f'EPPFT absorbed power: {eppft.p_abs:.6e} W')
print(f'Far field radiated power: {p_rad:.6e} W')
print(f'OPFT absorbed power: {opft.p_abs:.6e} W (electric currents alone carry no OPFT power)')
print(f'EPPFT force: {eppft.force} nN')
