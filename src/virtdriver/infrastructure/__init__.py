"""
Infrastructure Layer

Access to the libvirt hypervisor.
"""
