"""
Sparse partial least squares discriminant analysis (sPLS-DA).

Latent directions are estimated one component at a time from the
cross-covariance between the predictors and the (dummy-coded) outcome. Each
direction is made sparse by soft-thresholding at a fraction ``eta`` of its
largest absolute loading, so larger ``eta`` keeps fewer predictors. After a
component is extracted both X and Y are deflated. Class probabilities come
from linear discriminant analysis on the latent scores.

Reference:
    Chun & Keles (2010). Sparse partial least squares regression for
    simultaneous dimension reduction and variable selection. JRSS-B.
"""

import logging

import numpy as np
from sklearn.base import BaseEstimator, ClassifierMixin
from sklearn.discriminant_analysis import LinearDiscriminantAnalysis
from sklearn.preprocessing import label_binarize
from sklearn.utils.multiclass import unique_labels
from sklearn.utils.validation import check_array, check_is_fitted, check_X_y

logger = logging.getLogger(__name__)

_EPS = 1e-12


def soft_threshold_direction(z: np.ndarray, eta: float) -> np.ndarray:
    """
    Soft-threshold a direction vector at ``eta * max|z|`` and rescale to unit norm.

    Args:
        z: Direction vector (n_features,)
        eta: Sparsity in [0, 1); 0 keeps every loading

    Returns:
        Unit-norm sparse direction. The largest loading always survives.

    Example:
        >>> w = soft_threshold_direction(np.array([3.0, -1.0, 0.5]), eta=0.5)
        >>> (w != 0).tolist()
        [True, False, False]
    """
    if not 0.0 <= eta < 1.0:
        raise ValueError(f"eta must be in [0, 1), got {eta}")
    z = np.asarray(z, dtype=float)
    z_max = np.max(np.abs(z))
    if z_max <= _EPS:
        return np.zeros_like(z)
    w = np.sign(z) * np.maximum(np.abs(z) - eta * z_max, 0.0)
    return w / np.linalg.norm(w)


class SparsePLSDAClassifier(ClassifierMixin, BaseEstimator):
    """
    Sparse PLS-DA classifier with an sklearn interface.

    Parameters:
        n_components: Number of latent components (capped at n_features and
            n_samples - 1 during fit)
        eta: Sparsity parameter in [0, 1)
        scale: Standardize predictors before extracting components

    Attributes:
        classes_: Class labels
        x_weights_: Sparse direction per component (n_features, n_components_)
        x_loadings_: X loadings per component (n_features, n_components_)
        y_loadings_: Y loadings per component (n_targets, n_components_)
        x_rotations_: Projection from (scaled) X to scores, W (P'W)^-1
        coef_: Regression coefficients in the scaled space (n_targets, n_features)
        n_components_: Components actually extracted

    Examples:
        >>> from sklearn.datasets import make_classification
        >>> X, y = make_classification(n_samples=60, n_features=8, random_state=0)
        >>> clf = SparsePLSDAClassifier(n_components=2, eta=0.3).fit(X, y)
        >>> clf.predict_proba(X).shape
        (60, 2)
    """

    def __init__(self, n_components: int = 2, eta: float = 0.5, scale: bool = True):
        self.n_components = n_components
        self.eta = eta
        self.scale = scale

    def fit(self, X, y):
        if hasattr(X, "columns"):
            self.feature_names_in_ = np.asarray(X.columns, dtype=object)
        X, y = check_X_y(X, y, dtype=float)
        self.classes_ = unique_labels(y)
        if len(self.classes_) < 2:
            raise ValueError("SparsePLSDAClassifier needs at least two classes")
        if self.n_components < 1:
            raise ValueError(f"n_components must be >= 1, got {self.n_components}")

        n_samples, n_features = X.shape
        self.n_features_in_ = n_features

        self.x_mean_ = X.mean(axis=0)
        if self.scale:
            std = X.std(axis=0, ddof=1) if n_samples > 1 else np.ones(n_features)
            std[std <= _EPS] = 1.0
            self.x_std_ = std
        else:
            self.x_std_ = np.ones(n_features)
        Xk = (X - self.x_mean_) / self.x_std_

        # Binary outcomes use one indicator column; multi-class uses one per class
        Y = label_binarize(y, classes=self.classes_).astype(float)
        Yk = Y - Y.mean(axis=0)

        max_components = max(1, min(self.n_components, n_features, n_samples - 1))
        weights, x_loadings, y_loadings = [], [], []

        for k in range(max_components):
            M = Xk.T @ Yk
            if Yk.shape[1] == 1:
                z = M[:, 0]
            else:
                u, _, _ = np.linalg.svd(M, full_matrices=False)
                z = u[:, 0]
            # Orient so the dominant loading is positive
            if z[np.argmax(np.abs(z))] < 0:
                z = -z

            w = soft_threshold_direction(z, self.eta)
            t = Xk @ w
            tt = float(t @ t)
            if tt <= _EPS:
                if k == 0:
                    raise ValueError("First sPLS component is degenerate (constant predictors)")
                logger.debug(f"sPLS stopped after {k} components (X fully deflated)")
                break

            p = Xk.T @ t / tt
            c = Yk.T @ t / tt
            Xk = Xk - np.outer(t, p)
            Yk = Yk - np.outer(t, c)

            weights.append(w)
            x_loadings.append(p)
            y_loadings.append(c)

        self.x_weights_ = np.column_stack(weights)
        self.x_loadings_ = np.column_stack(x_loadings)
        self.y_loadings_ = np.column_stack(y_loadings)
        self.n_components_ = self.x_weights_.shape[1]

        self.x_rotations_ = self.x_weights_ @ np.linalg.pinv(self.x_loadings_.T @ self.x_weights_)
        self.coef_ = (self.x_rotations_ @ self.y_loadings_.T).T

        scores = ((X - self.x_mean_) / self.x_std_) @ self.x_rotations_
        self.lda_ = LinearDiscriminantAnalysis().fit(scores, y)
        return self

    def transform(self, X) -> np.ndarray:
        """Project samples onto the latent components."""
        check_is_fitted(self, "x_rotations_")
        X = check_array(X, dtype=float)
        if X.shape[1] != self.n_features_in_:
            raise ValueError(
                f"X has {X.shape[1]} features, but SparsePLSDAClassifier expects "
                f"{self.n_features_in_}"
            )
        return ((X - self.x_mean_) / self.x_std_) @ self.x_rotations_

    def predict_proba(self, X) -> np.ndarray:
        return self.lda_.predict_proba(self.transform(X))

    def predict(self, X) -> np.ndarray:
        return self.lda_.predict(self.transform(X))

    def decision_function(self, X) -> np.ndarray:
        return self.lda_.decision_function(self.transform(X))

    @property
    def selected_features_(self) -> np.ndarray:
        """Boolean mask of predictors with a non-zero weight in any component."""
        check_is_fitted(self, "x_weights_")
        return np.any(self.x_weights_ != 0, axis=1)
