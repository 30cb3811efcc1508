class LinearFee:
    """Linear fee schedule of a jormungandr blockchain.

    A transaction costs ``constant + coefficient * (inputs + outputs)`` plus
    ``certificate`` for each certificate it carries.
    """

    def __init__(self, constant=0, coefficient=0, certificate=0):
        self.constant = int(constant)
        self.coefficient = int(coefficient)
        self.certificate = int(certificate)
        for name in ("constant", "coefficient", "certificate"):
            if getattr(self, name) < 0:
                raise ValueError(f"Fee {name} cannot be negative.")

    @classmethod
    def from_dict(cls, fees):
        """Build the schedule from a mapping such as the ``fees`` section of
        the node settings or of a configuration file.
        """
        return cls(
            constant=fees.get("constant", 0),
            coefficient=fees.get("coefficient", 0),
            certificate=fees.get("certificate", 0),
        )

    def to_dict(self):
        return {
            "constant": self.constant,
            "coefficient": self.coefficient,
            "certificate": self.certificate,
        }

    def for_transaction(self, inputs, outputs, certificates=0):
        return (
            self.constant
            + self.coefficient * (inputs + outputs)
            + self.certificate * certificates
        )

    def amount_with_fees(self):
        """Amount taken from a single account input to pay for one
        certificate with no outputs.
        """
        return self.for_transaction(inputs=1, outputs=0, certificates=1)

    def __eq__(self, other):
        if not isinstance(other, LinearFee):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return (
            f"LinearFee(constant={self.constant}, "
            f"coefficient={self.coefficient}, "
            f"certificate={self.certificate})"
        )
