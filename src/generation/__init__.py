"""PDF generation: renderer interface, generator, render inputs."""
