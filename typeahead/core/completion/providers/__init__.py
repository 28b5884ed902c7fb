# Concrete completion providers; imported lazily by the factory.
